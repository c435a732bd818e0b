import pytest
from starlette.formparsers import MultiPartParser
from trailer_portal.core.security import authorize


@pytest.mark.parametrize(
    "supplied, configured, allowed",
    [
        ("", "secret", False),
        ("secret", "", False),
        ("", "", False),
        (None, "secret", False),
        ("secret", "secret", True),
        (" secret ", "secret", True),
        ("Secret", "secret", False),
    ],
)
def test_authorize(supplied, configured, allowed):
    assert authorize(supplied, configured) is allowed


def test_admin_requires_key(client, records):
    res = client.get("/admin")
    assert res.status_code == 403
    assert res.text == "Forbidden: admin key required"
    assert records.calls == []

def test_admin_wrong_key(client):
    assert client.get("/admin", params={"key": "nope"}).status_code == 403

def test_admin_key_from_query(client):
    assert client.get("/admin", params={"key": "secret"}).status_code == 200

def test_admin_key_from_header(client):
    assert client.get("/admin", headers={"x-admin-key": "secret"}).status_code == 200

def test_admin_key_from_form_body(client, records):
    records.seed("a", "A")
    res = client.post("/admin/delete/a", data={"key": "secret"}, follow_redirects=False)
    assert res.status_code == 303
    assert res.headers["location"] == "/admin?key=secret"

def test_empty_configured_key_disables_admin(make_client, records, blobs):
    client = make_client(ADMIN_KEY="")
    assert client.get("/admin", params={"key": ""}).status_code == 403
    res = client.post(
        "/admin/upload",
        data={"title": "x"},
        files={"video": ("x.mp4", b"data", "video/mp4")},
    )
    assert res.status_code == 403
    assert records.calls == []
    assert blobs.objects == {}


@pytest.fixture
def multipart_parses(monkeypatch):
    calls = []
    original = MultiPartParser.parse

    async def recording(self):
        calls.append(True)
        return await original(self)

    monkeypatch.setattr(MultiPartParser, "parse", recording)
    return calls

def test_upload_without_key_is_refused_before_body_is_parsed(client, records, blobs, multipart_parses):
    res = client.post(
        "/admin/upload",
        data={"title": "Clip"},
        files={"video": ("clip.mp4", b"\x00" * 4096, "video/mp4")},
    )
    assert res.status_code == 403
    assert multipart_parses == []
    assert records.calls == []
    assert blobs.objects == {}

def test_key_inside_multipart_body_is_not_accepted(client, multipart_parses):
    res = client.post(
        "/admin/upload",
        data={"title": "Clip", "key": "secret"},
        files={"video": ("clip.mp4", b"\x00" * 16, "video/mp4")},
    )
    assert res.status_code == 403
    assert multipart_parses == []

def test_authorized_upload_parses_body(client, multipart_parses):
    res = client.post(
        "/admin/upload?key=secret",
        data={"title": "Clip"},
        files={"video": ("clip.mp4", b"\x00" * 16, "video/mp4")},
        follow_redirects=False,
    )
    assert res.status_code == 303
    assert multipart_parses == [True]
