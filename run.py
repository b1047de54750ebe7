#!/usr/bin/env python
"""
Entry point for the Feedback Bot application.
Starts the FastAPI server with uvicorn.
"""

import uvicorn

from app.config import settings

if __name__ == "__main__":
    # Run the FastAPI application with uvicorn
    uvicorn.run(
        "app.main:app",
        host="127.0.0.1",
        port=8000,
        reload=settings.ENVIRONMENT == "dev",  # Auto-reload on code changes (dev only)
        log_level="info",
    )
