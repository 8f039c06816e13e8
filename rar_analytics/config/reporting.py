"""Logging configuration."""

from typing import Literal, Optional

from pydantic import BaseModel, Field


class LoggingConfig(BaseModel):
    """Logging configuration.

    Controls logging behavior including level, output destinations,
    and message formatting for the ``rar_analytics`` logger.
    """

    enabled: bool = Field(default=True, description="Enable logging")
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Logging level"
    )
    log_file: Optional[str] = Field(
        default=None, description="Log file path (None=no file logging)"
    )
    console_output: bool = Field(default=True, description="Log to console")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log message format",
    )
