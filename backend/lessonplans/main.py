"""
Lesson Plan Standardizer - FastAPI Application

This is the entry point for the backend. It:
1. Creates the FastAPI app instance
2. Configures CORS (so the web frontend can talk to us)
3. Registers route handlers and the AppError handler
4. Sets up startup/shutdown lifecycle events

Run with:
    uvicorn lessonplans.main:app --reload --port 8000
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from lessonplans.config import settings
from lessonplans.database import init_db
from lessonplans.errors import AppError
from lessonplans.routers import documents
from lessonplans.services.storage import get_storage_service

# IMPORTANT: Import models so SQLAlchemy registers them with Base.metadata
# before init_db() calls create_all(). Without this, no tables get created.
import lessonplans.models  # noqa: F401

SERVICE_NAME = "Lesson Plan Standardizer"
VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown logic.

    Code before 'yield' runs on startup.
    Code after 'yield' runs on shutdown.
    """
    # --- Startup ---
    print(f"🚀 Starting {SERVICE_NAME} API...")
    await init_db()
    print("✅ Database tables created/verified")
    get_storage_service().ensure_directories()
    print(f"📁 Upload directories ready under {settings.UPLOAD_DIR}")

    yield  # App is running, handling requests

    # --- Shutdown ---
    print("👋 Shutting down...")


app = FastAPI(
    title=f"{SERVICE_NAME} API",
    description="Upload lesson plans and generate standardized one-page PDFs",
    version=VERSION,
    lifespan=lifespan,
)

# --- CORS Middleware ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """Turn service-level errors into the same shape as HTTPException."""
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


app.include_router(documents.router)


# --- Health Check Endpoints ---

@app.get("/", tags=["health"])
async def root():
    """Root endpoint - confirms the API is alive."""
    return {
        "service": SERVICE_NAME,
        "status": "running",
        "version": VERSION,
    }


@app.get("/health", tags=["health"])
async def health_check():
    """Detailed health check - verifies database connectivity."""
    from sqlalchemy import text

    from lessonplans.database import AsyncSessionLocal

    try:
        async with AsyncSessionLocal() as session:
            await session.execute(text("SELECT 1"))
        db_status = "connected"
    except Exception as e:
        db_status = f"error: {str(e)}"

    return {
        "status": "healthy" if db_status == "connected" else "degraded",
        "database": db_status,
        "environment": settings.APP_ENV,
    }
