from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from app.api.auth import router as auth_router
from app.api.customers import router as customers_router
from app.api.dashboard import router as dashboard_router
from app.api.invoices import router as invoices_router
from app.config import get_settings
from app.db.engine import get_engine
from app.errors import DataAccessError
from app.utils.logging import configure_logging

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    yield
    if get_engine.cache_info().currsize:
        await get_engine().dispose()


app = FastAPI(
    title="Invoice Dashboard API",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    SessionMiddleware,
    secret_key=settings.session_secret,
    https_only=settings.is_production,
)


@app.exception_handler(DataAccessError)
async def data_access_error_handler(request: Request, exc: DataAccessError) -> JSONResponse:
    return JSONResponse(status_code=500, content={"detail": exc.message})


@app.get("/health")
def health_check():
    return {"status": "ok"}

app.include_router(auth_router)
app.include_router(dashboard_router)
app.include_router(customers_router)
app.include_router(invoices_router)
