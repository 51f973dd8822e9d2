from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from genmemo.domain.constants import DEFAULT_SERVER_URL, DEFAULT_SESSION_SIZE, REQUEST_TIMEOUT


def config_files() -> list[Path]:
    """Candidate config files, in priority order."""
    return [
        Path.home() / ".config/genmemo/config.toml",
        Path.home() / ".genmemo.toml",
    ]


class AppConfig(BaseSettings):
    """
    Configuration model for genmemo.
    Supports loading from:
    1. Environment variables (GENMEMO_*)
    2. Config file (~/.config/genmemo/config.toml)
    3. Manual overrides (CLI)
    """

    model_config = SettingsConfigDict(
        env_prefix="GENMEMO_",
        extra="ignore",
    )

    # Storage
    data_dir: Path = Field(
        default_factory=lambda: Path.home() / ".local/share/genmemo", validate_default=True
    )
    store_backend: Literal["json", "memory"] = "json"

    # Remote
    server_url: str = DEFAULT_SERVER_URL
    token: str | None = None
    request_timeout: float = REQUEST_TIMEOUT

    # Sessions
    session_size: int = DEFAULT_SESSION_SIZE
    seed: int | None = None

    verbose: int = 1

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        from pydantic_settings import TomlConfigSettingsSource

        # First existing file wins; init (CLI) beats env beats file
        toml_file = next((f for f in config_files() if f.exists()), None)

        if toml_file:
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (init_settings, env_settings)

    @field_validator("data_dir", mode="before")
    @classmethod
    def resolve_data_dir(cls, v: Any) -> Path:
        return Path(v).expanduser().resolve()

    @field_validator("server_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @property
    def store_path(self) -> Path:
        return self.data_dir / "progress.json"


def resolve_config(cli_overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. ~/.config/genmemo/config.toml (if exists)
    3. Environment variables (GENMEMO_*)
    4. cli_overrides (passed from Typer)
    """
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    return AppConfig(**overrides)
