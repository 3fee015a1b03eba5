import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from orderdesk.core.config import CORS_ORIGINS, ENV
from orderdesk.core.database import init_models
from orderdesk.core.http import register_error_handlers
from orderdesk.core.logging_setup import configure_logging
from orderdesk.middleware.observability import ObservabilityMiddleware
from orderdesk.routers.customers import router as customers_router
from orderdesk.routers.orders import router as orders_router
from orderdesk.routers.products import router as products_router

configure_logging()

logger = logging.getLogger(__name__)


async def _startup_tasks() -> None:
    await init_models()
    logger.info("orderdesk started env=%s", ENV)


@asynccontextmanager
async def lifespan(_: FastAPI):
    await _startup_tasks()
    yield


app = FastAPI(
    title="Orderdesk API",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(ObservabilityMiddleware)

register_error_handlers(app)

app.include_router(customers_router)
app.include_router(products_router)
app.include_router(orders_router)


@app.get("/")
def health():
    return {"status": "ok"}
