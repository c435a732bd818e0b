import logging
from contextvars import ContextVar
from .config import Settings, settings as default_settings

request_id_ctx: ContextVar[str] = ContextVar("request_id", default="-")

_installed = False

def _install_record_factory():
    # attach request_id to every log record
    global _installed
    if _installed:
        return
    old_factory = logging.getLogRecordFactory()
    def record_factory(*args, **kwargs):
        record = old_factory(*args, **kwargs)
        record.request_id = request_id_ctx.get()
        return record
    logging.setLogRecordFactory(record_factory)
    _installed = True

def setup_logging(settings: Settings | None = None):
    settings = settings or default_settings
    _install_record_factory()
    level = logging.DEBUG if settings.ENV == "local" else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s [%(request_id)s] %(message)s",
    )
