"""
User Config
"""

import os
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import pydantic as pd
import toml
from typing_extensions import Literal

from .exceptions import HydratorConfigFileError
from .file_path import hydrator_dir
from .log import log, set_logging_level

config_file = os.path.join(hydrator_dir, "config.toml")

_ENV_OVERRIDES = {
    "HYDRATOR_CONFORMITY": "default_conformity",
    "HYDRATOR_CACHE_BINDERS": "cache_binders",
    "HYDRATOR_TIMEZONE": "default_timezone",
    "HYDRATOR_LOG_LEVEL": "log_level",
}


class HydrationSettings(pd.BaseModel):
    """
    Settings read from the ``[hydration]`` table of ``config.toml``.
    """

    model_config = pd.ConfigDict(extra="forbid", validate_assignment=True)

    default_conformity: Literal["NONE", "PARTIAL", "COMPLETE"] = "NONE"
    cache_binders: bool = True
    default_timezone: Optional[str] = None
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"

    @pd.field_validator("default_conformity", "log_level", mode="before")
    @classmethod
    def _upper(cls, value):
        if isinstance(value, str):
            return value.upper()
        return value

    @pd.field_validator("default_timezone")
    @classmethod
    def _known_timezone(cls, value):
        if value is None:
            return value
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as error:
            raise ValueError(f"unknown timezone '{value}'") from error
        return value


class BasicUserConfig:
    """
    Basic User Configuration.
    """

    def __init__(self, filename: str = config_file):
        self._filename = filename
        self.settings = self._load()
        set_logging_level(self.settings.log_level)

    def _read_config(self) -> dict:
        if not os.path.exists(self._filename):
            return {}
        try:
            with open(self._filename, encoding="utf-8") as file_handler:
                return toml.loads(file_handler.read())
        except (OSError, toml.TomlDecodeError) as error:
            raise HydratorConfigFileError(
                f"Cannot read configuration file {self._filename}: {error}"
            ) from error

    def _load(self) -> HydrationSettings:
        values = dict(self._read_config().get("hydration", {}))
        for env_name, setting in _ENV_OVERRIDES.items():
            env_value = os.environ.get(env_name, None)
            if env_value is not None:
                log.info(f"Found env variable {env_name}={env_value}")
                values[setting] = env_value
        try:
            return HydrationSettings.model_validate(values)
        except pd.ValidationError as error:
            raise HydratorConfigFileError(f"Invalid hydration settings: {error}") from error

    def reload(self) -> HydrationSettings:
        """re-read config.toml and the environment"""
        self.settings = self._load()
        set_logging_level(self.settings.log_level)
        return self.settings

    @property
    def cache_binders(self) -> bool:
        """whether compiled key targets and binders are kept for reuse"""
        return self.settings.cache_binders

    @property
    def default_timezone(self) -> Optional[str]:
        """IANA timezone applied to naive datetimes during date coercion"""
        return self.settings.default_timezone

    @property
    def default_conformity(self) -> str:
        """conformity used by hydrate_many when the caller does not pass one"""
        return self.settings.default_conformity


UserConfig = BasicUserConfig()
