"""
Pydantic models for the account snapshot returned by the player API.
"""

from typing import Any

from pydantic import BaseModel, Field, ValidationInfo, field_validator

AUTHENTICATED = 1


class _PanelModel(BaseModel):
    """
    Base for player API blocks. Panels send `null` for fields they do not
    fill in; those fall back to the field default.
    """

    class Config:
        """Pydantic model configuration."""

        extra = "ignore"
        coerce_numbers_to_str = True

    @field_validator("*", mode="before")
    @classmethod
    def null_to_default(cls, v: Any, info: ValidationInfo) -> Any:
        if v is None:
            return cls.model_fields[info.field_name].get_default(
                call_default_factory=True
            )
        return v


class UserInfo(_PanelModel):
    """The `user_info` block of an account response."""

    username: str = ""
    message: str = ""
    auth: int = 0
    status: str = ""
    exp_date: str | None = None
    is_trial: str = "0"
    active_cons: str = "0"
    created_at: str | None = None
    max_connections: str = "0"
    allowed_output_formats: list[str] = Field(default_factory=list)

    @property
    def is_authenticated(self) -> bool:
        return self.auth == AUTHENTICATED


class ServerInfo(_PanelModel):
    """The `server_info` block of an account response."""

    url: str = ""
    port: str = ""
    https_port: str = ""
    server_protocol: str = ""
    rtmp_port: str = ""
    timezone: str = ""
    timestamp_now: int | None = None
    time_now: str = ""


class AccountInfo(_PanelModel):
    """Read-only account snapshot; never persisted."""

    user_info: UserInfo = Field(default_factory=UserInfo)
    server_info: ServerInfo = Field(default_factory=ServerInfo)
