from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Config models map YAML sections to typed structures; unknown keys fail fast everywhere.


class ServerConfig(BaseModel):
    # Listener settings plus which line service the server runs.
    model_config = ConfigDict(extra="forbid")
    host: str = "0.0.0.0"
    port: int = Field(default=12345, ge=0, le=65535)
    service: Literal["model_context", "broadcast"] = "model_context"
    backlog: int = Field(default=50, gt=0)
    # None keeps reads blocking indefinitely.
    read_timeout_seconds: float | None = Field(default=None, gt=0)
    accept_poll_seconds: float = Field(default=0.5, gt=0)


class LoggingConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")
    sink: Literal["stdout", "jsonl", "none"] = "stdout"
    path: str | None = None
    level: Literal["debug", "info", "warning", "error"] = "info"

    @model_validator(mode="after")
    def _require_path(self) -> LoggingConfig:
        # The jsonl sink has no sensible default location.
        if self.sink == "jsonl" and not self.path:
            raise ValueError("logging.path is required when sink is 'jsonl'")
        return self


class ResourcesConfig(BaseModel):
    # Root directory served by the file:// resource handler; None disables it.
    model_config = ConfigDict(extra="forbid")
    root: str | None = None


class AppConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")
    version: int = 1
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    resources: ResourcesConfig = Field(default_factory=ResourcesConfig)
