import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.cache import cache
from app.config import settings
from app.error_log import ErrorLogger
from app.errors import register_exception_handlers
from app.logging_config import configure_logging
from app.middleware import RequestContextMiddleware
from app.rate_limit import limiter
from app.routers import auth, blogs, comments, likes, public

logger = logging.getLogger("app")

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    configure_logging()
    await cache.connect()  # the API keeps working without Redis
    logger.info("Blog API started (env=%s, prefix=%s)", settings.APP_ENV, settings.API_PREFIX)
    yield
    # Shutdown
    await cache.disconnect()


app = FastAPI(
    title="Blog API",
    description="Multi-author blogging backend: auth, blogs, comments, likes and a public feed",
    version=VERSION,
    lifespan=lifespan,
)

app.state.limiter = limiter
app.state.error_logger = ErrorLogger(settings.ERROR_LOG_DIR)
register_exception_handlers(app)

# Middleware
app.add_middleware(RequestContextMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(auth.router, prefix=settings.API_PREFIX)
app.include_router(blogs.router, prefix=settings.API_PREFIX)
app.include_router(comments.router, prefix=settings.API_PREFIX)
app.include_router(likes.router, prefix=settings.API_PREFIX)
app.include_router(public.router, prefix=settings.API_PREFIX)


@app.get("/health")
async def health():
    return {"status": "healthy", "version": VERSION, "cache": cache.stats}
