from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from retain.domain.constants import (
    DEFAULT_INTERVAL_MODIFIER,
    DEFAULT_MAX_INTERVAL,
    DEFAULT_NEW_CARDS_PER_DAY,
    DEFAULT_REVIEW_CARDS_PER_DAY,
    MAX_EASE,
    MIN_EASE,
)
from retain.domain.models import Algorithm, Deck, DeckSettings


def config_file_candidates() -> list[Path]:
    return [
        Path.home() / ".config/retain/config.toml",
        Path.home() / ".retain.toml",
    ]


class RetainConfig(BaseSettings):
    """
    Scheduler configuration.
    Supports loading from:
    1. Config file (~/.config/retain/config.toml or ~/.retain.toml)
    2. Environment variables (RETAIN_*)
    3. Manual overrides (CLI)
    """

    model_config = SettingsConfigDict(
        env_prefix="RETAIN_",
        extra="ignore",
    )

    # Strategy
    algorithm: Algorithm = Algorithm.SUPER_MEMO_2
    adaptive: bool = False

    # Scheduler bounds
    min_ease: float = Field(default=MIN_EASE, gt=0, le=MAX_EASE)
    max_interval: int = Field(default=DEFAULT_MAX_INTERVAL, ge=1)
    interval_modifier: float = Field(default=DEFAULT_INTERVAL_MODIFIER, gt=0)

    # Daily limits
    new_cards_per_day: int = Field(default=DEFAULT_NEW_CARDS_PER_DAY, ge=0)
    review_cards_per_day: int = Field(default=DEFAULT_REVIEW_CARDS_PER_DAY, ge=0)

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

        # First existing file wins
        toml_file = next((f for f in config_file_candidates() if f.exists()), None)

        if toml_file:
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (init_settings, env_settings)

    def deck_settings(self) -> DeckSettings:
        return DeckSettings(
            min_ease=self.min_ease,
            max_interval=self.max_interval,
            interval_modifier=self.interval_modifier,
            new_cards_per_day=self.new_cards_per_day,
            review_cards_per_day=self.review_cards_per_day,
        )

    def deck(self, name: str = "Default") -> Deck:
        return Deck(algorithm=self.algorithm, settings=self.deck_settings(), name=name)


def resolve_config(cli_overrides: dict[str, Any] | None = None) -> RetainConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in RetainConfig
    2. ~/.config/retain/config.toml (if exists)
    3. Environment variables (RETAIN_*)
    4. cli_overrides (passed from Typer; None values are ignored)
    """
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    return RetainConfig(**overrides)
