from fastapi import APIRouter, Request

from muchtodo.config import APP_NAME, APP_VERSION

router = APIRouter()

# Fields safe to expose; credentials stay out.
PUBLIC_CONFIG_FIELDS = (
    "server_port",
    "db_name",
    "enable_cache",
    "redis_addr",
    "log_level",
    "log_format",
    "cookie_domains",
    "secure_cookie",
    "allowed_origins",
    "jwt_expiration_hours",
)


@router.get("/health", summary="Health check endpoint", response_description="Application health status")
async def health_check():
    """
    Checks the health of the application.
    Returns a simple success message if the application is running.
    """
    return {"status": "ok", "message": "Application is running normally."}


@router.get("/version", summary="Application version endpoint", response_description="Application name and version")
async def get_version():
    """
    Returns the current application name and version.
    """
    return {"app_name": APP_NAME, "version": APP_VERSION}


@router.get("/config", summary="Effective configuration", response_description="Non-secret configuration values")
async def get_config(request: Request):
    """
    Returns the effective configuration without credentials.
    """
    config = request.app.state.config
    return config.model_dump(include=set(PUBLIC_CONFIG_FIELDS))
