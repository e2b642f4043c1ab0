import re

import pydantic as pd
import pytest

from hydrator.exceptions import HydratorConfigFileError
from hydrator.user_config import BasicUserConfig

_ENV_NAMES = [
    "HYDRATOR_CONFORMITY",
    "HYDRATOR_CACHE_BINDERS",
    "HYDRATOR_TIMEZONE",
    "HYDRATOR_LOG_LEVEL",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in _ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def _write(path, content):
    path.write_text(content, encoding="utf-8")
    return str(path)


def test_defaults_without_config_file(tmp_path, clean_env):
    config = BasicUserConfig(str(tmp_path / "missing.toml"))
    assert config.default_conformity == "NONE"
    assert config.cache_binders is True
    assert config.default_timezone is None
    assert config.settings.log_level == "WARNING"


def test_config_file(tmp_path, clean_env):
    filename = _write(
        tmp_path / "config.toml",
        """
[hydration]
default_conformity = "partial"
cache_binders = false
default_timezone = "Europe/Berlin"
""",
    )
    config = BasicUserConfig(filename)
    assert config.default_conformity == "PARTIAL"
    assert config.cache_binders is False
    assert config.default_timezone == "Europe/Berlin"


def test_other_tables_are_ignored(tmp_path, clean_env):
    filename = _write(tmp_path / "config.toml", '[default]\napikey = "abc"\n')
    config = BasicUserConfig(filename)
    assert config.default_conformity == "NONE"


def test_env_overrides_config_file(tmp_path, clean_env):
    filename = _write(tmp_path / "config.toml", "[hydration]\ncache_binders = false\n")
    clean_env.setenv("HYDRATOR_CACHE_BINDERS", "true")
    clean_env.setenv("HYDRATOR_CONFORMITY", "complete")
    clean_env.setenv("HYDRATOR_TIMEZONE", "UTC")
    config = BasicUserConfig(filename)
    assert config.cache_binders is True
    assert config.default_conformity == "COMPLETE"
    assert config.default_timezone == "UTC"


def test_reload(tmp_path, clean_env):
    path = tmp_path / "config.toml"
    config = BasicUserConfig(str(path))
    assert config.default_conformity == "NONE"
    _write(path, '[hydration]\ndefault_conformity = "COMPLETE"\n')
    settings = config.reload()
    assert settings.default_conformity == "COMPLETE"
    assert config.default_conformity == "COMPLETE"


def test_invalid_config_file(tmp_path, clean_env):
    filename = _write(tmp_path / "config.toml", "[hydration\n")
    with pytest.raises(
        HydratorConfigFileError, match=re.escape(f"Cannot read configuration file {filename}")
    ):
        BasicUserConfig(filename)


def test_invalid_settings(tmp_path, clean_env):
    filename = _write(tmp_path / "config.toml", '[hydration]\ndefault_conformity = "SOME"\n')
    with pytest.raises(HydratorConfigFileError, match="Invalid hydration settings"):
        BasicUserConfig(filename)

    filename = _write(tmp_path / "unknown.toml", "[hydration]\nstrict = true\n")
    with pytest.raises(HydratorConfigFileError, match="Invalid hydration settings"):
        BasicUserConfig(filename)


def test_unknown_timezone(tmp_path, clean_env):
    filename = _write(tmp_path / "config.toml", '[hydration]\ndefault_timezone = "Mars/Olympus"\n')
    with pytest.raises(HydratorConfigFileError, match="unknown timezone 'Mars/Olympus'"):
        BasicUserConfig(filename)

    clean_env.setenv("HYDRATOR_TIMEZONE", "Mars/Olympus")
    with pytest.raises(HydratorConfigFileError, match="unknown timezone 'Mars/Olympus'"):
        BasicUserConfig(str(tmp_path / "missing.toml"))


def test_timezone_assignment_is_validated(hydration_settings):
    with pytest.raises(pd.ValidationError, match="unknown timezone 'Mars/Olympus'"):
        hydration_settings.default_timezone = "Mars/Olympus"
    hydration_settings.default_timezone = "UTC"
    assert hydration_settings.default_timezone == "UTC"
