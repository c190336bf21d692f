import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from starlette import status as status_codes
from starlette.responses import JSONResponse, RedirectResponse

from .config import Settings
from .errors import ConstraintViolationError, NotFoundError, PersistenceError, ValidationError
from .routers.customers import router as customers_router
from .routers.invoices import router as invoices_router
from .routers.photos import router as photos_router
from .routers.schedule import router as schedule_router
from .routers.tasks import router as tasks_router
from .routers.vehicles import router as vehicles_router
from .store import WorkshopStore

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, store: Optional[WorkshopStore] = None) -> FastAPI:
    """Builds the API around one store; the schema is checked on every start."""
    settings = settings or Settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        app.state.store.close()

    app = FastAPI(title="AutoOrganize - Workshop Records", lifespan=lifespan)
    app.state.store = store or WorkshopStore(settings)
    app.state.store.init_schema()

    # Include the routers (order does not matter)
    app.include_router(customers_router)
    app.include_router(vehicles_router)
    app.include_router(tasks_router)
    app.include_router(invoices_router)
    app.include_router(photos_router)
    app.include_router(schedule_router)

    # --- Store errors -> HTTP ---
    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        return JSONResponse(status_code=422, content={"detail": str(exc), "errors": exc.errors})

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(ConstraintViolationError)
    async def handle_constraint_violation(request: Request, exc: ConstraintViolationError):
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    @app.exception_handler(PersistenceError)
    async def handle_persistence_error(request: Request, exc: PersistenceError):
        logger.error("Request %s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=500, content={"detail": "Database error."})

    # Redirect to the customer list
    @app.get("/", include_in_schema=False)
    def redirect_to_list():
        return RedirectResponse(url="/customers/", status_code=status_codes.HTTP_302_FOUND)

    @app.get("/status")
    def status(request: Request):
        return {
            "status": "ok",
            "database": app.state.store.engine.url.render_as_string(hide_password=True),
            "task_delete_policy": app.state.store.settings.task_delete_policy.value,
        }

    return app
