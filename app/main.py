import time
import uuid
import logging
from contextlib import asynccontextmanager
from dotenv import load_dotenv

# Load environment variables from .env file before anything else
load_dotenv()

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from app.core.config import settings
from app.core.logging import setup_logging, request_id_ctx, current_request_id
from app.core.redis import redis_manager
from app.api.router import api_router
from app.platform.provider_registry import registry
from app.modules.consent.errors import ConsentError
from app.modules.consent.repository import ConsentRepository
from app.modules.consent.service import ConsentService
from app.modules.consent.validator import ConsentValidator
from app.modules.accounts.repository import AccountRepository
from app.modules.accounts.service import AccountService


setup_logging()
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting %s (env=%s, storage=%s)", settings.APP_NAME, settings.ENV, settings.STORAGE_PROVIDER)
    yield
    await redis_manager.close()

def create_app() -> FastAPI:
    app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

    consent_service = ConsentService(
        ConsentRepository(registry.kv_store()),
        clock=registry.clock(),
        bus=registry.event_bus(),
    )
    app.state.consent_service = consent_service
    app.state.consent_validator = ConsentValidator(consent_service)
    app.state.account_service = AccountService(AccountRepository())

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = time.time()

        response = await call_next(request)

        process_time = (time.time() - start_time) * 1000
        formatted_process_time = f"{process_time:.2f}ms"

        logger.info(
            f"Request: {request.method} {request.url.path} - Response: {response.status_code} - Time: {formatted_process_time}"
        )

        return response

    # registered last so it runs first and the id is set for the logger above
    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        rid = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = rid
        token = request_id_ctx.set(rid)
        try:
            response = await call_next(request)
        finally:
            request_id_ctx.reset(token)
        response.headers["x-request-id"] = rid
        return response

    @app.exception_handler(ConsentError)
    async def consent_error_handler(request: Request, exc: ConsentError):
        content = {
            "success": False,
            "error": exc.__class__.__name__,
            "message": exc.detail,
            "correlation_id": request_id_ctx.get(),
        }
        invalid = getattr(exc, "invalid_scopes", None)
        if invalid:
            content["invalid_scopes"] = invalid
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.critical(f"Unhandled exception for request {request.method} {request.url.path}", exc_info=True)
        # runs outside add_request_id, after the context var has been reset
        rid = getattr(request.state, "request_id", None) or current_request_id()
        return JSONResponse(
            status_code=500,
            content={"message": "An internal server error occurred.", "correlation_id": rid},
            headers={"x-request-id": rid},
        )

    app.include_router(api_router, prefix=settings.API_PREFIX)
    return app

app = create_app()
