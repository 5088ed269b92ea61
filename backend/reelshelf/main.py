"""FastAPI main application."""

import os
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from reelshelf.config import settings
from reelshelf.database import init_db, SessionLocal
from reelshelf.exception_handlers import setup_exception_handlers
from reelshelf.services.auth_service import AuthService
from reelshelf.services.logging_service import logger

from reelshelf.routers import (
    auth,
    users,
    uploads,
    lists,
    watchlater,
    wishlist,
    reviews,
    social,
    catalog,
    search,
    platforms,
    health
)

from reelshelf.middleware import (
    RateLimitMiddleware,
    SecurityHeadersMiddleware,
    RequestValidationMiddleware,
    AuditLogMiddleware
)

app = FastAPI(
    title="ReelShelf API",
    description="Reviews, lists and social features for movies, TV shows and games",
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestValidationMiddleware, max_content_length=10 * 1024 * 1024)
app.add_middleware(AuditLogMiddleware)
app.add_middleware(
    RateLimitMiddleware,
    max_requests=settings.RATE_LIMIT_PER_MINUTE,
    window_seconds=60
)

setup_exception_handlers(app)

# Uploaded profile pictures are served from disk
os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")


@app.on_event("startup")
async def startup_event():
    """Initialize application on startup."""
    init_db()

    db = SessionLocal()
    try:
        removed = AuthService.cleanup_expired_sessions(db)
    finally:
        db.close()

    logger.info(
        "Application started",
        environment=settings.ENVIRONMENT,
        version=settings.APP_VERSION,
        expired_sessions_removed=removed
    )


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "ReelShelf API",
        "version": settings.APP_VERSION,
        "status": "operational",
        "environment": settings.ENVIRONMENT,
        "documentation": "/docs"
    }


app.include_router(health.router, tags=["Health & Monitoring"])
app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
app.include_router(users.router, prefix="/api/users", tags=["Users"])
app.include_router(uploads.router, prefix="/api/uploads", tags=["Uploads"])
app.include_router(lists.router, prefix="/api/lists", tags=["Lists"])
app.include_router(watchlater.router, prefix="/api/watchlater", tags=["Watch Later"])
app.include_router(wishlist.router, prefix="/api/wishlist", tags=["Wishlist"])
app.include_router(reviews.router, prefix="/api/reviews", tags=["Reviews"])
app.include_router(social.router, prefix="/api/social", tags=["Social"])
app.include_router(catalog.router, prefix="/api/catalog", tags=["Catalog"])
app.include_router(search.router, prefix="/api/search", tags=["Search"])
app.include_router(platforms.router, prefix="/api/platforms", tags=["Platforms"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "reelshelf.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
