"""Configuration settings for the FarmPro reporting service."""

import os
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Config:
    """Application configuration."""

    # Database Configuration
    DATABASE_PATH = os.getenv("DATABASE_PATH", "farmpro.db")

    # Localization
    # Strip inline comments that Docker env_file doesn't handle
    APP_TIMEZONE = os.getenv("APP_TIMEZONE", "Africa/Nairobi").split("#")[0].strip()

    # Report Configuration
    REPORT_QUERY_TIMEOUT = float(os.getenv("REPORT_QUERY_TIMEOUT", "5"))  # seconds
    REPORT_RECORD_LIMIT = int(os.getenv("REPORT_RECORD_LIMIT", "250"))

    # FastAPI Configuration
    API_HOST = os.getenv("API_HOST", "0.0.0.0")
    API_PORT = int(os.getenv("API_PORT", "8080"))
    API_RELOAD = os.getenv("API_RELOAD", "true").lower() == "true"
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173").split(",")

    # Logging Configuration
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @classmethod
    def validate_config(cls) -> bool:
        """
        Validate that the configuration is usable.

        Returns:
            True if configuration is valid, False otherwise
        """
        try:
            ZoneInfo(cls.APP_TIMEZONE)
        except (ZoneInfoNotFoundError, ValueError):
            print(f"ERROR: Unknown APP_TIMEZONE '{cls.APP_TIMEZONE}'. Use an IANA name such as Africa/Nairobi.")
            return False

        if cls.REPORT_QUERY_TIMEOUT <= 0:
            print(f"ERROR: REPORT_QUERY_TIMEOUT must be positive, got {cls.REPORT_QUERY_TIMEOUT}")
            return False

        if cls.REPORT_RECORD_LIMIT < 1:
            print(f"ERROR: REPORT_RECORD_LIMIT must be at least 1, got {cls.REPORT_RECORD_LIMIT}")
            return False

        return True

    @classmethod
    def get_report_config(cls) -> dict:
        """
        Get report pipeline settings as a dictionary.

        Returns:
            Dict with report settings
        """
        return {
            "timezone": cls.APP_TIMEZONE,
            "query_timeout": cls.REPORT_QUERY_TIMEOUT,
            "record_limit": cls.REPORT_RECORD_LIMIT,
        }
