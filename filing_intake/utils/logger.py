import sys
from loguru import logger
from filing_intake.config import settings

def setup_logger():
    """Configure logger with appropriate settings"""
    logger.remove()  # Remove default handler
    logger.configure(extra={"name": "filing_intake"})  # Default for unbound records

    # Console logging
    logger.add(
        sys.stdout,
        level=settings.LOG_LEVEL,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{extra[name]}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        colorize=True
    )

    # File logging
    if settings.LOG_FILE:
        logger.add(
            settings.LOG_FILE,
            level="DEBUG",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[name]}:{function}:{line} - {message}",
            rotation="10 MB",
            retention="7 days",
            compression="zip"
        )

    return logger

def get_logger(name: str = __name__):
    """Get logger instance bound to a module name"""
    return logger.bind(name=name)
