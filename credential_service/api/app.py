from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from .error import ClientError, ServerError
import logging

logger = logging.getLogger(__name__)


async def handle_client_error(request: Request, exc: ClientError):
    error_dict = {"code": exc.base_error.code, "message": exc.base_error.message}
    logger.warning(f"Client error: {error_dict}")
    return JSONResponse(status_code=exc.status_code, content={"error": error_dict})


async def handle_server_error(request: Request, exc: ServerError):
    if exc.status_code == status.HTTP_503_SERVICE_UNAVAILABLE:
        # Retryable; the message carries no internals
        error_dict = {"code": exc.base_error.code, "message": exc.base_error.message}
        logger.warning(f"Service unavailable: {exc.base_error.code}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": error_dict},
            headers={"Retry-After": "1"},
        )

    error_dict = {"code": exc.base_error.code, "message": "Internal server error"}
    logger.error(f"Server error: {exc.base_error.code}")
    return JSONResponse(status_code=exc.status_code, content={"error": error_dict})


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    from credential_service.depends import get_reset_flow_controller

    # Scheduled reset notifications finish before shutdown
    provider = app.dependency_overrides.get(get_reset_flow_controller, get_reset_flow_controller)
    controller = await provider()
    await controller.wait_for_notifications()


def create_app(ApplicationConfig) -> FastAPI:
    app = FastAPI(title="Credential Service", version="0.1.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ApplicationConfig.CORS_ORIGINS,
        allow_credentials=ApplicationConfig.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from credential_service.api.routes import auth, health_check

    app.include_router(health_check.router, tags=["Health"])
    app.include_router(auth.router, tags=["Password Reset"])

    app.add_exception_handler(ClientError, handle_client_error)
    app.add_exception_handler(ServerError, handle_server_error)

    return app
