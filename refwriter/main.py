from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from refwriter.core.config import settings
from refwriter.core.errors import ContentError
from refwriter.core.limiter import limiter, get_client_ip, redis_available
from refwriter.core.logging import api_logger, setup_logger
import logging
from datetime import datetime

# Import routers
from refwriter.api.v1.endpoints import content
from refwriter.api.v1.endpoints import documents
from refwriter.api.v1.endpoints import frontend

setup_logger()
logger = logging.getLogger(__name__)

# Instanzio l'app FastAPI e configuro le sue proprietà
app = FastAPI(
    title=settings.app_name,
    description="Reference Writer Backend",
    version="1.0.0"
)

# Registra il rate limiter nell'app
app.state.limiter = limiter

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Custom rate limit exception handler
@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    """Handler personalizzato per errori di rate limiting"""
    client_ip = get_client_ip(request)
    await api_logger.log_security_event(
        event_type="rate_limit_exceeded",
        client_ip=client_ip,
        details=str(exc.detail)
    )

    return JSONResponse(
        status_code=429,
        content={
            "error": "Rate limit exceeded",
            "message": f"Too many requests. {exc.detail}",
            "retry_after": getattr(exc, 'retry_after', 60),
            "type": "rate_limit_error",
            "timestamp": datetime.utcnow().isoformat()
        }
    )

@app.exception_handler(ContentError)
async def content_error_handler(request: Request, exc: ContentError):
    logger.warning(f"{exc.code} on {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": exc.to_detail(),
            "timestamp": datetime.utcnow().isoformat()
        }
    )

# Vado a includere i routers che ho creato
app.include_router(
    content.router,
    prefix="/api/v1/content",
    tags=["Content Generation"]
)

app.include_router(
    documents.router,
    prefix="/api/v1/documents",
    tags=["Reference Documents"]
)

app.include_router(
    frontend.router,
    prefix="/api/v1/frontend",
    tags=["Frontend"]
)

@app.get("/")
async def root():
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": "1.0.0",
        "environment": settings.environment,
        "docs": "/docs" if settings.debug else None,
        "rate_limiting": ("redis" if redis_available else "memory") if settings.RATE_LIMIT_ENABLED else "disabled",
        "timestamp": datetime.utcnow().isoformat()
    }

@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": "1.0.0",
        "environment": settings.environment,
        "timestamp": datetime.utcnow().isoformat(),
        "services": {
            "redis": "connected" if redis_available else "not configured",
            "rate_limiting": "redis" if redis_available else "memory",
            "celery_broker": settings.celery_broker_url.split("://")[0]
        }
    }

@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    logger.error(f"Global exception: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "message": "Internal server error",
            "detail": str(exc) if settings.debug else "Something went wrong",
            "timestamp": datetime.utcnow().isoformat()
        }
    )

# Startup event
@app.on_event("startup")
async def startup_event():
    logger.info(f"🚀 {settings.app_name} starting up...")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Debug mode: {settings.debug}")
    logger.info(f"Simulated latency: generation {settings.GENERATION_DELAY_SECONDS}s, detection {settings.DETECTION_DELAY_SECONDS}s")

    if redis_available:
        logger.info("✅ Rate limiting with Redis enabled")
    else:
        logger.warning("⚠️  Using in-memory rate limiting")

@app.on_event("shutdown")
async def shutdown_event():
    logger.info(f"🛑 {settings.app_name} shutting down...")
