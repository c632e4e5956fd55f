"""
FastAPI Application Entry Point
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from rich.markup import escape

from funding_intake.api.v1.router import api_router
from funding_intake.core.config import settings
from funding_intake.database.connection import DatabasePool
from funding_intake.database.session import init_db, init_session_factory, reset_session_factory
from funding_intake.schemas.intake import HealthResponse
from funding_intake.utils.logging import app_logger, get_logger

logger = get_logger(__name__)


def _uses_database() -> bool:
    return settings.round_robin.cursor_store == "database"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for application startup and shutdown.
    The database pool is only opened when the rotation cursor is persisted there.
    """
    # Startup
    app_logger.info("🚀 [bold green]Initializing application...[/bold green]")
    try:
        if _uses_database():
            app_logger.info("📊 [cyan]Initializing database connection pool...[/cyan]")
            DatabasePool.initialize()
            init_session_factory()
            init_db()
        if not settings.email.configured:
            app_logger.warning("⚠️  [yellow]Email API key missing: submissions will fail[/yellow]")
        if not settings.crm.configured:
            app_logger.warning("⚠️  [yellow]Zoho CRM credentials missing: lead routing disabled[/yellow]")
        app_logger.info("✅ [bold green]Application initialized successfully[/bold green]")
    except Exception as e:
        app_logger.error(f"❌ [bold red]Failed to initialize application:[/bold red] {escape(str(e))}")
        raise

    yield

    # Shutdown
    app_logger.info("🛑 [yellow]Shutting down application...[/yellow]")
    if DatabasePool.is_initialized():
        app_logger.info("📊 [cyan]Closing database connection pool...[/cyan]")
        DatabasePool.close()
        reset_session_factory()
    app_logger.info("✅ [bold green]Application shut down successfully[/bold green]")


app = FastAPI(
    title=settings.project_name,
    version=settings.version,
    description=settings.description,
    openapi_url=f"{settings.api_v1_str}/openapi.json",
    lifespan=lifespan,
)

# CORS middleware
if settings.backend_cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(origin) for origin in settings.backend_cors_origins],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

# Include API router
app.include_router(api_router, prefix=settings.api_v1_str)


@app.get("/")
async def root():
    """Root endpoint"""
    return {"message": "Funding intake API is running", "version": settings.version}


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint"""
    status = "healthy"
    if _uses_database() and not DatabasePool.get_pool_status()["initialized"]:
        logger.error("[red]❌ Health check: database pool not initialized[/red]")
        status = "unhealthy"
    return HealthResponse(status=status, version=settings.version, cursor_store=settings.round_robin.cursor_store)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("funding_intake.main:app", host="0.0.0.0", port=8000)
