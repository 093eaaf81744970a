import logging
import uuid
from contextvars import ContextVar
from .config import settings

request_id_ctx: ContextVar[str] = ContextVar("request_id", default="-")

def current_request_id() -> str:
    """Request id of the running request, or a fresh one outside a request."""
    rid = request_id_ctx.get()
    return rid if rid != "-" else str(uuid.uuid4())

def setup_logging():
    level = logging.DEBUG if settings.ENV == "local" else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s [%(request_id)s] %(message)s",
    )

    # attach request_id to log records
    old_factory = logging.getLogRecordFactory()
    if getattr(old_factory, "_stamps_request_id", False):
        return

    def record_factory(*args, **kwargs):
        record = old_factory(*args, **kwargs)
        record.request_id = request_id_ctx.get()
        return record

    record_factory._stamps_request_id = True
    logging.setLogRecordFactory(record_factory)
