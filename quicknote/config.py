"""
QuickNote - Application Configuration
=======================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by every module that needs configuration values.
When:  Loaded once at module import time; validated in the app lifespan.

Environment variables keep the names the service has always used
(NOTE_DIR, S3_BUCKET, S3_PREFIX, PORT, URL), so existing deployments need no
changes.
"""

from typing import Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have defaults suitable for local development with the disk
    backend. An S3 deployment must at least set S3_BUCKET.
    """

    # ── Storage ───────────────────────────────────────────────────────────
    # "auto" picks S3 inside AWS Lambda (no writable persistent disk there)
    # and the local disk everywhere else.
    storage_backend: Literal["auto", "disk", "s3"] = Field(default="auto")

    # Disk backend: one file per note, named exactly by the note id
    note_dir: str = Field(default="./notes")

    # S3 backend: one object per note at "<s3_prefix>/<note id>"
    s3_bucket: str = Field(default="")
    s3_prefix: str = Field(default="note")
    s3_region: str = Field(default="", description="Empty = SDK default region")
    s3_endpoint_url: str = Field(
        default="",
        description="Custom endpoint for S3-compatible stores (MinIO, LocalStack)",
    )

    # Set by the Lambda runtime; only used for backend auto-detection
    aws_lambda_function_name: str = Field(default="")

    # ── HTTP ──────────────────────────────────────────────────────────────
    # Public base URL used in the share link handed to terminal clients.
    # Empty = derive it from the request (Host / X-Forwarded-* headers).
    public_url: str = Field(
        default="",
        validation_alias=AliasChoices("public_url", "url"),
    )

    cors_allow_origin: str = Field(default="*")

    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8080, ge=1, le=65535)

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }

    @property
    def running_in_lambda(self) -> bool:
        return bool(self.aws_lambda_function_name)

    @property
    def resolved_backend(self) -> str:
        """The concrete backend name ("disk" or "s3") after resolving "auto"."""
        if self.storage_backend == "auto":
            return "s3" if self.running_in_lambda else "disk"
        return self.storage_backend

    def validate_required(self) -> None:
        """
        Validates that the settings needed by the selected backend are present.

        When:    Called while building storage and during app startup.
        Raises:  ValueError listing every missing setting.
        """
        errors = []
        if self.resolved_backend == "s3" and not self.s3_bucket:
            errors.append("S3_BUCKET environment variable is required for the S3 backend.")
        if self.resolved_backend == "disk" and not self.note_dir:
            errors.append("NOTE_DIR must not be empty for the disk backend.")
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


# Singleton instance, imported throughout the application
settings = Settings()
