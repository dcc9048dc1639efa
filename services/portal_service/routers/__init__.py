"""Portal service routers package."""

from services.portal_service.routers.activities import router as activities_router
from services.portal_service.routers.admin import router as admin_router
from services.portal_service.routers.auth import router as auth_router
from services.portal_service.routers.dashboard import router as dashboard_router
from services.portal_service.routers.enrollments import router as enrollments_router
from services.portal_service.routers.files import router as files_router
from services.portal_service.routers.guests import children_router as guest_children_router
from services.portal_service.routers.guests import router as guests_router
from services.portal_service.routers.members import router as members_router
from services.portal_service.routers.messages import router as messages_router
from services.portal_service.routers.sessions import router as sessions_router
from services.portal_service.routers.volunteers import tasks_router, volunteers_router

__all__ = [
    "activities_router",
    "admin_router",
    "auth_router",
    "dashboard_router",
    "enrollments_router",
    "files_router",
    "guest_children_router",
    "guests_router",
    "members_router",
    "messages_router",
    "sessions_router",
    "tasks_router",
    "volunteers_router",
]
