"""NutriTrack Server - Entry point.

Serves the JSON API for the web client and the MCP tools over HTTP.
"""

import logging

import uvicorn
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route, Mount

from .shell.api import routes as api_routes
from .shell.auth import parse_bearer
from .shell.config import Settings
from .shell.context import current_session, get_auth_client, get_settings
from .shell.mcp_server import mcp


logging.basicConfig(
    level=get_settings().log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

PROTECTED_PREFIXES = ("/mcp", "/api")


# ==================== Route Handlers ====================


async def health_check(request: Request) -> JSONResponse:
    """Health check endpoint."""
    return JSONResponse({"status": "healthy", "service": "nutritrack"})


async def register_user(request: Request) -> JSONResponse:
    """Register a new user and return their API key."""
    try:
        body = await request.json()
        email = body.get("email")

        if not email or "@" not in email:
            return JSONResponse({"error": "Valid email is required"}, status_code=400)

        api_key, _ = get_auth_client().register_user(email)

        return JSONResponse({
            "api_key": api_key,
            "message": "Registration successful! Save your API key - it won't be shown again.",
            "mcp_url": f"{get_settings().base_url}/mcp",
        })

    except Exception as e:
        logger.error("Registration failed: %s", str(e))
        return JSONResponse({"error": "Registration failed."}, status_code=500)


async def validate_key(request: Request) -> JSONResponse:
    """Validate an API key."""
    try:
        body = await request.json()
        api_key = body.get("api_key")

        if not api_key:
            return JSONResponse({"valid": False, "error": "API key required"})

        session = get_auth_client().authenticate(api_key)
        return JSONResponse({"valid": session is not None})

    except Exception as e:
        logger.error("Validation failed: %s", str(e))
        return JSONResponse({"valid": False, "error": "Validation failed"})


# ==================== Auth Middleware ====================


class AuthMiddleware(BaseHTTPMiddleware):
    """Resolve the bearer API key of /api and /mcp requests to a session."""

    async def dispatch(self, request: Request, call_next):
        if not request.url.path.startswith(PROTECTED_PREFIXES):
            return await call_next(request)

        api_key = parse_bearer(request.headers.get("Authorization"))
        session = get_auth_client().authenticate(api_key) if api_key else None

        request.state.session = session
        current_session.set(session)
        if session is not None:
            logger.debug("Authenticated user: %s", session.user_id[:8])

        return await call_next(request)


# ==================== Create ASGI App ====================


def create_app(settings: Settings | None = None) -> Starlette:
    """Create the Starlette application.

    The MCP streamable_http_app() handles /mcp internally when mounted at
    root, so it goes last; its lifespan starts the MCP session manager.
    """
    settings = settings or get_settings()
    mcp_app = mcp.streamable_http_app()

    routes = [
        Route("/health", health_check, methods=["GET"]),
        Route("/auth/register", register_user, methods=["POST"]),
        Route("/auth/validate", validate_key, methods=["POST"]),
        *api_routes,
        Mount("/", app=mcp_app),
    ]

    return Starlette(
        routes=routes,
        middleware=[
            Middleware(
                CORSMiddleware,
                allow_origins=settings.cors_origins,
                allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
                allow_headers=["*"],
            ),
            Middleware(AuthMiddleware),
        ],
        lifespan=mcp_app.router.lifespan_context,
    )


app = create_app()


def main() -> None:
    """Run the server."""
    settings = get_settings()

    logger.info("Starting NutriTrack server on %s:%d", settings.host, settings.port)

    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
