from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

from habit_hub.core.config import settings
from habit_hub.core.errors import register_exception_handlers
from habit_hub.core.llm import llm_client
from habit_hub.db.session import create_tables
from habit_hub.routes import ai, categories, habits, reports


# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"Starting {settings.app_name} API")
    logger.info(f"CORS allow_origins: {settings.cors_origins}")
    logger.info(f"Local timezone: {settings.timezone}, model: {settings.openai_model}")
    await create_tables()
    yield
    # Shutdown
    await llm_client.close()
    logger.info("Shutting down API")


app = FastAPI(
    title=f"{settings.app_name} API",
    description="Habit tracking with progress per day or week and an AI assistant",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include routers
app.include_router(habits.router, prefix="/habits", tags=["habits"])
app.include_router(categories.router, prefix="/categories", tags=["categories"])
app.include_router(reports.router, prefix="/reports", tags=["reports"])
app.include_router(ai.router, prefix="/ai", tags=["ai"])


@app.get("/")
async def root():
    return {
        "message": f"Welcome to {settings.app_name} API",
        "version": "1.0.0"
    }


@app.get("/health")
async def health():
    return {"status": "healthy", "app": settings.app_name}
