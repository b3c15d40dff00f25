import re
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CONFIG_PATH = Path("config") / "settings.yaml"


class AuthSettings(BaseModel):
    """Authentication descriptor handed verbatim to the driver handshake."""

    scheme: str = "none"
    principal: Optional[str] = None
    credentials: Optional[str] = None
    realm: Optional[str] = None
    parameters: dict[str, Any] = Field(default_factory=dict)

    model_config = SettingsConfigDict(extra="forbid")

    def as_descriptor(self) -> dict[str, Any]:
        descriptor: dict[str, Any] = {"scheme": self.scheme}
        for key in ("principal", "credentials", "realm"):
            value = getattr(self, key)
            if value is not None:
                descriptor[key] = value
        descriptor.update(self.parameters)
        return descriptor


class BoltSettings(BaseSettings):
    """Connection details for the Bolt server."""

    host: str = "127.0.0.1"
    port: int = Field(default=7687, ge=1, le=65535)
    timeout: float = Field(default=15.0, gt=0, description="Seconds")
    protocol_version: Optional[str] = Field(
        default=None, description="Request a specific 'major.minor' protocol version"
    )
    auth: AuthSettings = Field(default_factory=AuthSettings)

    model_config = SettingsConfigDict(
        env_prefix="NEO4J_", env_nested_delimiter="__", env_file=".env", extra="ignore"
    )

    @field_validator("protocol_version")
    @classmethod
    def _check_protocol_version(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not re.fullmatch(r"\d+(\.\d+)?", value):
            raise ValueError(f"Invalid protocol version: {value!r}")
        return value


class LoggingSettings(BaseModel):
    level: str = "INFO"
    format: str = (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
    )
    file_path: Optional[str] = None
    enable_console: bool = True

    @field_validator("level")
    @classmethod
    def _check_level(cls, value: str) -> str:
        value = value.upper()
        if value not in {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value}")
        return value


class RuntimeSettings(BaseSettings):
    """Central runtime settings loaded from YAML and environment."""

    bolt: BoltSettings = Field(
        default_factory=BoltSettings,
        description="Bolt connection options",
    )
    logging: LoggingSettings = Field(
        default_factory=LoggingSettings,
        description="Log sink options",
    )

    model_config = SettingsConfigDict(
        env_file=".env", env_nested_delimiter="__", extra="ignore"
    )


def load_runtime_settings(
    path: Optional[Union[str, Path]] = None,
) -> RuntimeSettings:
    """
    Load runtime settings from a YAML file and environment variables.

    When ``path`` is omitted, ``config/settings.yaml`` is used if it exists.
    Sections missing from the file fall back to the environment (``NEO4J_*``
    for the connection) and then to defaults.

    Raises:
        FileNotFoundError: If an explicit ``path`` does not exist.
        ValueError: If the file cannot be parsed or fails validation.
    """
    yaml_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    data: dict[str, Any] = {}
    if yaml_path.exists():
        try:
            with open(yaml_path) as fh:
                data = yaml.safe_load(fh) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {yaml_path}: {exc}") from exc
    elif path is not None:
        raise FileNotFoundError(f"Config file not found: {yaml_path}")

    if not isinstance(data, dict):
        raise ValueError(f"Config file {yaml_path} must contain a mapping")

    try:
        if "bolt" in data:
            # Nested BaseSettings are validated as plain models; merge env first.
            data["bolt"] = BoltSettings(**data["bolt"])
        return RuntimeSettings(**data)
    except ValidationError as exc:
        raise ValueError(str(exc)) from exc
