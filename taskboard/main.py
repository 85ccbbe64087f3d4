from fastapi import FastAPI

from taskboard.errors import install_error_handlers
from taskboard.log import configure_logging
from taskboard.routes.admin import router as admin_router
from taskboard.routes.auth import router as auth_router
from taskboard.routes.health import router as health_router
from taskboard.routes.orgs import router as orgs_router
from taskboard.routes.projects import router as projects_router
from taskboard.routes.tasks import router as tasks_router
from taskboard.routes.users import router as users_router

def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title="taskboard-api", version="0.1.0")
    install_error_handlers(app)
    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(orgs_router)
    app.include_router(users_router)
    app.include_router(projects_router)
    app.include_router(tasks_router)
    app.include_router(admin_router)
    return app

app = create_app()
