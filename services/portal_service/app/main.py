"""FastAPI application for the staff portal."""

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

load_dotenv()

from libs.auth.middleware import add_auth_redirect_middleware  # noqa: E402
from libs.common.config import get_settings  # noqa: E402
from libs.common.middleware import add_observability_middleware  # noqa: E402
from services.portal_service.routers import (  # noqa: E402
    activities_router,
    admin_router,
    auth_router,
    dashboard_router,
    enrollments_router,
    files_router,
    guest_children_router,
    guests_router,
    members_router,
    messages_router,
    sessions_router,
    tasks_router,
    volunteers_router,
)


def create_app() -> FastAPI:
    """Create and configure the portal FastAPI app."""
    settings = get_settings()
    app = FastAPI(
        title="Ansattportal",
        version="0.1.0",
        description="Members, activities, sessions and guest lists for the organization's staff.",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.FRONTEND_URL],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    add_auth_redirect_middleware(app)
    # Added last so it wraps everything and every log line carries the request id
    add_observability_middleware(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "portal"}

    app.include_router(activities_router)
    app.include_router(sessions_router)
    app.include_router(members_router)
    app.include_router(enrollments_router)
    app.include_router(guests_router)
    app.include_router(guest_children_router)
    app.include_router(volunteers_router)
    app.include_router(tasks_router)
    app.include_router(files_router)
    app.include_router(messages_router)
    app.include_router(dashboard_router)
    app.include_router(admin_router)
    app.include_router(auth_router)

    return app


app = create_app()
