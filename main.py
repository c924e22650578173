#!/usr/bin/env python3
"""
Filing Intake - Main Entry Point
Client document intake with AI-assisted tax document analysis
"""

import uvicorn

from filing_intake.config import settings

def main():
    """Main entry point for the application"""
    print("=" * 60)
    print("Filing Intake - Document Analysis & Strategy Insights")
    print("=" * 60)
    print(f"Upload storage: {'S3 (' + settings.AWS_S3_BUCKET + ')' if settings.s3_configured else settings.UPLOAD_DIR}")
    print(f"Data directory: {settings.DATA_DIR}")
    print(f"Max file size: {settings.MAX_FILE_SIZE // (1024 * 1024)}MB, {settings.MAX_FILES_PER_UPLOAD} files per upload")
    print(f"Groq AI: {'Configured' if settings.GROQ_API_KEY else 'Not configured'}")
    print(f"Server: http://{settings.API_HOST}:{settings.API_PORT}")
    print(f"API Docs: http://{settings.API_HOST}:{settings.API_PORT}/docs")
    print("=" * 60)

    if not settings.GROQ_API_KEY:
        print("WARNING: GROQ_API_KEY not configured!")
        print("   Documents will be stored, and every analysis result will carry an error.")
        print("   Configure GROQ_API_KEY in the .env file to enable AI analysis.")
        print()
    else:
        print(f"Model: {settings.GROQ_MODEL}")
        print(f"Max tokens: {settings.AI_MAX_TOKENS}, temperature: {settings.AI_TEMPERATURE}, timeout: {settings.AI_TIMEOUT_SECONDS}s")
        print()

    # Run the application
    uvicorn.run(
        "filing_intake.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.API_RELOAD,
        log_level=settings.LOG_LEVEL.lower()
    )

if __name__ == "__main__":
    main()
