#!/usr/bin/env python3
"""Startup script for the FarmPro reports API."""

import sys
import logging
from farmpro.config import Config

# Configure logging
logging.basicConfig(
    level=getattr(logging, Config.LOG_LEVEL),
    format=Config.LOG_FORMAT
)

logger = logging.getLogger(__name__)


def main():
    """Start the FastAPI server."""
    # Validate configuration
    if not Config.validate_config():
        logger.error("Configuration validation failed. Please check your .env file.")
        sys.exit(1)

    logger.info("Starting FarmPro Reports API...")
    logger.info(f"Server will run on http://{Config.API_HOST}:{Config.API_PORT}")
    logger.info(f"Report settings: {Config.get_report_config()}")

    # Start uvicorn
    import uvicorn

    uvicorn.run(
        "farmpro.api:app",
        host=Config.API_HOST,
        port=Config.API_PORT,
        reload=Config.API_RELOAD,
        log_level=Config.LOG_LEVEL.lower()
    )


if __name__ == "__main__":
    main()
