"""Configuration schema using Pydantic.

Persisted to ~/.noderelay/config.json; every field can be overridden with
NODERELAY_* environment variables (nested with "__", e.g. NODERELAY_RPC__URL).
"""

from pathlib import Path

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from noderelay.auth import Auth


class RpcConfig(BaseModel):
    """Node RPC endpoint and credentials."""
    url: str = "http://127.0.0.1:8332"
    user: str = ""
    password: str = ""
    cookie_file: str = ""  # e.g. ~/.bitcoin/.cookie; takes precedence over user/password


class LoggingConfig(BaseModel):
    """Log sinks configured by the CLI."""
    level: str = "WARNING"
    file: str = ""  # rotating log file path; empty disables file logging


class Config(BaseSettings):
    """Root configuration for noderelay."""
    rpc: RpcConfig = Field(default_factory=RpcConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def get_auth(self) -> Auth:
        """Cookie file first, then user/password, else no authentication."""
        if self.rpc.cookie_file:
            return Auth.cookie_file(Path(self.rpc.cookie_file).expanduser())
        if self.rpc.user and self.rpc.password:
            return Auth.user_pass(self.rpc.user, self.rpc.password)
        return Auth.none()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # environment wins over values read from the config file
        return env_settings, init_settings, dotenv_settings, file_secret_settings

    model_config = SettingsConfigDict(
        env_prefix="NODERELAY_",
        env_nested_delimiter="__",
    )
