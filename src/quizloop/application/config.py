from pathlib import Path
from typing import Any

from pydantic import Field, field_validator, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from quizloop.application.selection import SelectionWeights
from quizloop.domain.constants import (
    DEFAULT_SESSION_SIZE,
    FEEDBACK_DELAY,
    PROGRESS_FILE_NAME,
    RECENCY_CAP_DAYS,
    SPEED_MODE_DURATION,
    WEIGHT_BASE,
    WEIGHT_GAP,
    WEIGHT_RECENCY,
    WEIGHT_UNSEEN,
)

CONFIG_FILES = [
    Path.home() / ".config/quizloop/config.toml",
    Path.home() / ".quizloop.toml",
]


class AppConfig(BaseSettings):
    """
    Configuration model for quizloop.
    Supports loading from:
    1. Config file (~/.config/quizloop/config.toml or ~/.quizloop.toml)
    2. Environment variables (QUIZLOOP_*)
    3. Manual overrides (CLI)
    """

    model_config = SettingsConfigDict(
        env_prefix="QUIZLOOP_",
        extra="ignore",
    )

    # Paths
    data_dir: Path = Field(default_factory=lambda: Path.home() / ".local/share/quizloop")
    bank_path: Path | None = None  # None = bundled sample bank
    progress_file: Path | None = None  # None = <data_dir>/progress.json
    log_dir: Path = Field(default_factory=lambda: Path.home() / ".config/quizloop/logs")

    # Sessions
    session_size: int = Field(default=DEFAULT_SESSION_SIZE, ge=1)
    speed_duration: int = Field(default=SPEED_MODE_DURATION, ge=1)
    feedback_delay: float = Field(default=FEEDBACK_DELAY, ge=0)
    seed: int | None = None

    # Selection weighting curve
    weight_unseen: float = Field(default=WEIGHT_UNSEEN, gt=0)
    weight_base: float = Field(default=WEIGHT_BASE, gt=0)
    weight_gap: float = Field(default=WEIGHT_GAP, ge=0)
    weight_recency: float = Field(default=WEIGHT_RECENCY, ge=0)
    recency_cap_days: float = Field(default=RECENCY_CAP_DAYS, ge=0)

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

        toml_file = next((f for f in CONFIG_FILES if f.exists()), None)

        # Earlier sources win: CLI overrides, then env, then the TOML file
        if toml_file:
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (init_settings, env_settings)

    @field_validator("data_dir", "log_dir", mode="before")
    @classmethod
    def resolve_dir(cls, v: Any) -> Path:
        return Path(v).expanduser().resolve()

    @field_validator("bank_path", "progress_file", mode="before")
    @classmethod
    def resolve_optional_path(cls, v: Any) -> Path | None:
        if v:
            return Path(v).expanduser().resolve()
        return None

    @model_validator(mode="after")
    def check_weights(self) -> "AppConfig":
        if self.weight_unseen < self.weight_base:
            raise ValueError("weight_unseen must be >= weight_base")
        return self

    @property
    def progress_path(self) -> Path:
        return self.progress_file or self.data_dir / PROGRESS_FILE_NAME

    def selection_weights(self) -> SelectionWeights:
        return SelectionWeights(
            unseen=self.weight_unseen,
            base=self.weight_base,
            gap=self.weight_gap,
            recency=self.weight_recency,
            recency_cap_days=self.recency_cap_days,
        )


def resolve_config(cli_overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. ~/.config/quizloop/config.toml (if exists)
    3. Environment variables (QUIZLOOP_*)
    4. cli_overrides (passed from Typer)
    """
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    return AppConfig(**overrides)
