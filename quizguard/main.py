"""
Quiz Guard Service - FastAPI Application
"""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
import time

from .config import settings
from .security.api import router as quiz_security_router
from .utils.logging import (
    configure_root_logging,
    generate_request_id,
    log_error,
    log_request_end,
    log_startup,
)


configure_root_logging(settings.LOG_LEVEL)

# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description="Anti-cheating rules and result scoring for mock interview quizzes",
    version="1.0.0",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None
)


# ============================================================================
# Request Logging Middleware
# ============================================================================

@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all incoming requests with timing."""
    start = time.time()
    request_id = generate_request_id()
    path = request.url.path

    try:
        response = await call_next(request)
    except Exception as e:
        log_error("RequestError", str(e), request_id)
        raise

    if path not in ["/health", "/favicon.ico"]:
        duration_ms = int((time.time() - start) * 1000)
        log_request_end(request_id, request.method, path, response.status_code, duration_ms)

    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,  # Must be False when using wildcard origin
    allow_methods=["*"],
    allow_headers=["*"],
)


app.include_router(quiz_security_router)


@app.on_event("startup")
async def startup_event():
    """Log service startup."""
    log_startup(settings.APP_NAME, settings.PORT)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": "1.0.0"
    }


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": settings.APP_NAME,
        "docs": "/docs" if settings.DEBUG else "Disabled in production"
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("quizguard.main:app", host="0.0.0.0", port=settings.PORT, reload=settings.DEBUG)
