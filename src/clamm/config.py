import logging
import tomllib
from pathlib import Path
from typing import Literal

import tomlkit
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from clamm.logging import logger

CONFIG_DIR = Path.home() / ".config" / "clamm"
CONFIG_FILE = CONFIG_DIR / "config.toml"

type LogLevel = Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]


class PoolSettings(BaseModel):
    # Default fee in pips (hundredths of a basis point) for newly built pools
    fee: int = Field(default=3000, ge=0, lt=1_000_000)
    tick_spacing: int = Field(default=1, gt=0)


class LoggingSettings(BaseModel):
    level: LogLevel = "INFO"

    @field_validator("level", mode="before")
    def uppercase_level(
        cls,  # noqa: N805
        level: str,
    ) -> str:
        return level.upper()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CLAMM_",
        env_nested_delimiter="__",
    )

    pool: PoolSettings = PoolSettings()
    logging: LoggingSettings = LoggingSettings()


def load_config_from_file(config_path: Path) -> Settings:
    return Settings.model_validate(
        tomllib.loads(
            config_path.read_text(),
        ),
    )


def save_config_to_file(config: Settings, config_path: Path = CONFIG_FILE) -> None:
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(
        tomlkit.dumps(
            config.model_dump(),
        ),
    )
    logger.info(f"Saved configuration to {config_path}.")


def apply_logging_settings(config: Settings) -> None:
    logger.setLevel(logging.getLevelNamesMapping()[config.logging.level])


settings = load_config_from_file(CONFIG_FILE) if CONFIG_FILE.exists() else Settings()
apply_logging_settings(settings)
