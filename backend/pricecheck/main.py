"""PriceCheck - FastAPI Backend"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from pricecheck.api import health, products, queue, records, stores
from pricecheck.core.config import settings
from pricecheck.core.database import engine
from pricecheck.core.rate_limit import limiter

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup - initialize database when records live in SQL
    if settings.STORAGE_BACKEND == "sql":
        from pricecheck.core.database import init_db
        await init_db()

        # Seed default stores
        from pricecheck.services.seed_service import seed_data
        await seed_data()

    logger.info("PriceCheck started with %s storage", settings.STORAGE_BACKEND)
    yield
    # Shutdown
    await engine.dispose()


app = FastAPI(
    title="PriceCheck API",
    description="Scan a price tag, record the price, and find out if it is the best one seen",
    version="1.0.0",
    lifespan=lifespan,
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

# CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes
app.include_router(health.router, tags=["Health"])
app.include_router(records.router, prefix="/api/v1/records", tags=["Records"])
app.include_router(products.router, prefix="/api/v1/products", tags=["Products"])
app.include_router(queue.router, prefix="/api/v1/queue", tags=["Queue"])
app.include_router(stores.router, prefix="/api/v1/stores", tags=["Stores"])
