from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import uvicorn

from filing_intake.api.routes import router
from filing_intake.config import settings
from filing_intake.utils.logger import setup_logger, get_logger

# Setup logging
setup_logger()
logger = get_logger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # Startup
    logger.info("Starting Filing Intake service...")

    # Log configuration
    logger.info(f"Upload storage: {'S3 bucket ' + settings.AWS_S3_BUCKET if settings.s3_configured else settings.UPLOAD_DIR}")
    logger.info(f"Data directory: {settings.DATA_DIR}")
    logger.info(f"Max file size: {settings.MAX_FILE_SIZE} bytes, max files per upload: {settings.MAX_FILES_PER_UPLOAD}")
    logger.info(f"AI model: {settings.GROQ_MODEL} (timeout {settings.AI_TIMEOUT_SECONDS}s)")
    logger.info(f"AI analysis on intake submissions: {settings.ENABLE_AI_ANALYSIS}")

    if not settings.GROQ_API_KEY:
        logger.warning("GROQ_API_KEY not configured. Documents will be stored but not analyzed.")

    yield

    # Shutdown
    logger.info("Shutting down Filing Intake service...")

# Create FastAPI application
app = FastAPI(
    title="Filing Intake",
    description="Client document intake with AI-assisted tax document analysis and strategy insights",
    version="1.0.0",
    lifespan=lifespan
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(router, prefix="/api", tags=["Intake"])

# Root endpoint
@app.get("/")
async def root():
    """Welcome endpoint"""
    return {
        "message": "Welcome to Filing Intake",
        "version": "1.0.0",
        "docs": "/docs",
        "api_base": "/api"
    }

if __name__ == "__main__":
    uvicorn.run(
        "filing_intake.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.API_RELOAD,
        log_level=settings.LOG_LEVEL.lower()
    )
