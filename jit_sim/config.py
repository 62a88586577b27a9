"""
Configuration settings for the simulation core

Loads environment variables and provides simulator configuration.
"""
import logging
import os
from typing import Optional, Union

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Settings:
    """Simulator settings"""

    # Logging
    LOG_LEVEL: str = os.getenv("JIT_SIM_LOG_LEVEL", "WARNING").upper()
    LOG_FORMAT: str = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

    # Swap engine: maximum tick-spacing steps scanned per next-tick lookup
    TICK_SCAN_LIMIT: int = max(1, int(os.getenv("JIT_SIM_TICK_SCAN_LIMIT", 256)))

    # Token decimals used when a pool snapshot does not carry them
    DEFAULT_DECIMALS: int = int(os.getenv("JIT_SIM_DEFAULT_DECIMALS", 18))


# Create global settings instance
settings = Settings()


def configure_logging(level: Optional[Union[str, int]] = None) -> None:
    """Configure root logging for applications embedding the simulator"""
    logging.basicConfig(
        level=level if level is not None else settings.LOG_LEVEL,
        format=settings.LOG_FORMAT,
    )
