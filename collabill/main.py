from fastapi import FastAPI

from collabill.logging_config import setup_logging
from collabill.routes.auth import router as auth_router
from collabill.routes.health import router as health_router
from collabill.routes.invitations import router as invitations_router
from collabill.routes.invoices import router as invoices_router
from collabill.routes.presences import router as presences_router
from collabill.routes.projects import router as projects_router
from collabill.routes.tasks import router as tasks_router
from collabill.routes.users import router as users_router

def create_app() -> FastAPI:
    setup_logging()

    app = FastAPI(title="collabill", version="0.1.0")
    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(invitations_router)
    app.include_router(projects_router)
    app.include_router(tasks_router)
    app.include_router(presences_router)
    app.include_router(invoices_router)
    return app

app = create_app()
