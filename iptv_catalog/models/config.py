"""
Pydantic model for application configuration.
Provides robust validation for all settings.
"""

from pathlib import Path

from pydantic import BaseModel, Field, field_validator, model_validator

DEFAULT_USER_AGENT = "iptv-catalog/0.1 (+https://pypi.org/project/iptv-catalog/)"
DEFAULT_DATABASE_NAME = "iptv_data.db"


class AppConfig(BaseModel):
    """A validated configuration model for the application."""

    # Storage
    database_path: str = ""
    batch_size: int = 500

    # Network
    chunk_size: int = 65536
    connect_timeout: float = 15.0
    read_timeout: float = 90.0
    account_timeout: float = 60.0
    user_agent: str = DEFAULT_USER_AGENT

    # Logging
    log_dir: str = ""
    structured_logs: bool = False

    # Internal fields not loaded from INI file
    config_path: str = Field(..., repr=False)

    class Config:
        """Pydantic model configuration."""

        validate_assignment = True
        str_strip_whitespace = True

    @field_validator("batch_size")
    @classmethod
    def validate_batch_size(cls, v: int) -> int:
        """Keeps multi-row inserts within a sane statement size."""
        if v < 1 or v > 5000:
            raise ValueError("Batch size must be between 1 and 5000.")
        return v

    @field_validator("chunk_size")
    @classmethod
    def validate_chunk_size(cls, v: int) -> int:
        if v < 1024:
            raise ValueError("Chunk size must be at least 1024 bytes.")
        return v

    @field_validator("connect_timeout", "read_timeout", "account_timeout")
    @classmethod
    def validate_timeouts(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Timeouts must be positive numbers of seconds.")
        return v

    @model_validator(mode="after")
    def validate_logging(self) -> "AppConfig":
        """Structured logs need somewhere to go."""
        if self.structured_logs and not self.log_dir:
            raise ValueError("'structured_logs' requires 'log_dir' to be set.")
        return self

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns a set of all keys that are expected in the INI file."""
        internal_fields = {"config_path"}
        return {key for key in cls.model_fields if key not in internal_fields}

    def resolve_database_path(self) -> Path:
        """The configured database file, defaulting to one beside the config."""
        if self.database_path:
            return Path(self.database_path).expanduser()
        return Path(self.config_path) / DEFAULT_DATABASE_NAME

    def resolve_log_dir(self) -> Path | None:
        if not self.structured_logs:
            return None
        return Path(self.log_dir).expanduser()
