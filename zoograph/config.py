"""
zoograph Configuration

Loads configuration from environment variables with sensible defaults.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()


class Config:
    """Application configuration loaded from environment variables."""

    # Storage backend: "memory" keeps everything in dicts, "json" writes
    # one document per collection under ZOO_DATA_DIR
    STORE: str = os.getenv("ZOO_STORE", "memory")
    DATA_DIR: Path = Path(os.getenv("ZOO_DATA_DIR", "zoo_data"))

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FILE: str | None = os.getenv("LOG_FILE")

    # Project Paths
    PROJECT_ROOT: Path = Path(__file__).parent.parent
    LAYOUTS_DIR: Path = Path(os.getenv("ZOO_LAYOUTS_DIR", str(PROJECT_ROOT / "layouts")))

    STORES = ("memory", "json")
    LOG_LEVELS = ("DEBUG", "INFO", "WARN", "WARNING", "ERROR")

    @classmethod
    def validate(cls) -> None:
        """Validate configuration and raise errors if values are unusable."""
        if cls.STORE not in cls.STORES:
            raise ValueError(
                f"ZOO_STORE must be one of {', '.join(cls.STORES)} (got {cls.STORE!r})"
            )

        if cls.LOG_LEVEL.upper() not in cls.LOG_LEVELS:
            raise ValueError(
                f"LOG_LEVEL must be one of DEBUG, INFO, WARN, ERROR (got {cls.LOG_LEVEL!r})"
            )

    @classmethod
    def display(cls) -> str:
        """Return a formatted string showing current configuration."""
        lines = [
            "zoograph Configuration:",
            f"  Store: {cls.STORE}",
            f"  Data dir: {cls.DATA_DIR}",
            f"  Log level: {cls.LOG_LEVEL}",
            f"  Log file: {cls.LOG_FILE or '-'}",
            f"  Layouts: {cls.LAYOUTS_DIR}",
        ]
        return "\n".join(lines)
