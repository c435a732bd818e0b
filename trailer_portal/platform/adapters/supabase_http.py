import httpx
from trailer_portal.core.config import Settings

def make_supabase_client(settings: Settings, transport: httpx.AsyncBaseTransport | None = None) -> httpx.AsyncClient:
    """One client per process, shared by the record and blob adapters."""
    key = settings.SUPABASE_KEY
    return httpx.AsyncClient(
        base_url=settings.SUPABASE_URL or "http://supabase.invalid",
        headers={"apikey": key, "Authorization": f"Bearer {key}"},
        timeout=httpx.Timeout(settings.SUPABASE_TIMEOUT_SECONDS),
        transport=transport,
    )

def error_detail(response: httpx.Response) -> str:
    # PostgREST sends {"message": ...}, Storage sends {"error": ..., "message": ...}
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        return str(body.get("message") or body.get("error") or body)
    return str(body)
