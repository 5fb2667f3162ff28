from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..constants import DEFAULT_BUCKET_KEY, DEFAULT_KARMA_FILE


class BotConfig(BaseModel):
    """Connection settings for the IRC bot.

    Attributes:
        server: IRC server host name.
        port: IRC server port.
        nickname: Nick used for USER/NICK registration.
        channels: Channels joined after registration, in order.
        ssl: Whether to wrap the socket in TLS.
        bucket_key: Rate bucket shared by every sender using the same key.
    """

    model_config = ConfigDict(frozen=True)

    server: str = Field(min_length=1)
    port: int = Field(ge=1, le=65535)
    nickname: str = Field(min_length=1)
    channels: list[str]
    ssl: bool = False
    bucket_key: str = Field(default=DEFAULT_BUCKET_KEY, min_length=1)

    @field_validator("server", "nickname", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("channels", mode="before")
    @classmethod
    def validate_channels(cls, v: Any) -> list[str]:
        """Strip whitespace and drop blank entries, keeping the join order."""
        if not isinstance(v, list):
            raise ValueError("channels must be a list")
        return [c.strip() for c in v if isinstance(c, str) and c.strip()]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> BotConfig:
        return cls.model_validate(dict(data))


class AppConfig(BaseModel):
    """Whole-file configuration: the connection plus the karma store location."""

    model_config = ConfigDict(frozen=True)

    bot: BotConfig
    karma_file: str = Field(default=DEFAULT_KARMA_FILE, min_length=1)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump()
