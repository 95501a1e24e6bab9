from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from garage_iam.app.services.notification_service import NotificationDeliveryError
from .error import ClientError, ServerError
from .utils.rate_limit import IpRateLimiter
import logging

logger = logging.getLogger(__name__)


async def handle_client_error(request: Request, exc: ClientError):
    error_dict = exc.base_error.to_dict()
    logger.warning(f"Client error: {exc.base_error.code}")
    return JSONResponse(
        status_code=exc.status_code, content={"error": error_dict}, headers=exc.headers
    )


async def handle_server_error(request: Request, exc: ServerError):
    error_dict = {"code": exc.base_error.code, "message": "Internal server error"}
    logger.error(f"Server error: {exc.base_error.code}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": error_dict}
    )


async def handle_delivery_error(request: Request, exc: NotificationDeliveryError):
    error_dict = {
        "code": "EMAIL_DELIVERY_FAILED",
        "message": "Failed to send verification code. Please try again.",
    }
    logger.error(f"Email delivery failed: {exc}")
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY, content={"error": error_dict}
    )


def create_app(ApplicationConfig) -> FastAPI:
    app = FastAPI(title="Garage IAM API", version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ApplicationConfig.CORS_ORIGINS,
        allow_credentials=ApplicationConfig.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.accept_limiter = IpRateLimiter(
        ApplicationConfig.ACCEPT_RATE_LIMIT,
        ApplicationConfig.ACCEPT_RATE_WINDOW_MINUTES,
        namespace="invite-accept",
    )

    from garage_iam.api.routes import health_check, invites, tenant_invites

    app.include_router(health_check.router, tags=["Health"])
    app.include_router(invites.router, tags=["Invites"])
    app.include_router(tenant_invites.router, tags=["Tenant Invites"])

    app.add_exception_handler(ClientError, handle_client_error)
    app.add_exception_handler(ServerError, handle_server_error)
    app.add_exception_handler(NotificationDeliveryError, handle_delivery_error)

    return app
