from __future__ import annotations

import json
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Mapping, Optional

import yaml

try:
    import tomllib as toml
except ImportError:
    import tomli as toml

from .errors import ConfigError, InputError
from .utils import parse_bool, parse_int

DEFAULT_CONFIG = "settings.json"

# Environment variables override values read from the config file.
ENV_BINDINGS = {
    "site_name": "DOCR_WEBSITE_NAME",
    "github_username": "DOCR_GITHUB_USERNAME",
    "site_url": "DOCR_WEBSITE_URL",
    "site_description": "DOCR_WEBSITE_DESCRIPTION",
    "markdown_dir": "DOCR_MARKDOWN_DIR",
    "template_dir": "DOCR_TEMPLATE_DIR",
    "output_dir": "DOCR_OUTPUT_DIR",
    "timestamps_from_filename": "DOCR_TIMESTAMPS_FROM_FILENAME",
    "enable_rss": "DOCR_ENABLE_RSS",
    "builtin_templates": "DOCR_BUILTIN_TEMPLATES",
    "clean": "DOCR_CLEAN",
    "build_workers": "DOCR_BUILD_WORKERS",
    "footer_year": "DOCR_FOOTER_YEAR",
}

# camelCase keys used by older settings.json files.
KEY_ALIASES = {
    "githubUsername": "github_username",
    "websiteName": "site_name",
    "templateDir": "template_dir",
    "markdownDir": "markdown_dir",
    "outputDir": "output_dir",
    "websiteURL": "site_url",
    "websiteDescription": "site_description",
    "timestampsFromFilename": "timestamps_from_filename",
}


@dataclass(frozen=True)
class Settings:
    site_name: str = "docr"
    github_username: str = ""
    site_url: str = ""
    site_description: str = ""
    markdown_dir: Path = Path("markdown")
    template_dir: Path = Path("templates")
    output_dir: Path = Path("public")
    timestamps_from_filename: bool = False
    enable_rss: bool = True
    builtin_templates: bool = False
    clean: bool = False
    build_workers: int = 1
    footer_year: str = ""

    @classmethod
    def from_mapping(cls, values: Mapping[str, object]) -> "Settings":
        """Build settings from loosely typed values, coercing each field.

        Unknown keys are ignored so a config file may carry extra entries.
        """
        defaults = cls()
        kwargs = {}
        for field in fields(cls):
            if field.name not in values or values[field.name] is None:
                continue
            value = values[field.name]
            default = getattr(defaults, field.name)
            if isinstance(default, bool):
                kwargs[field.name] = parse_bool(value)
            elif isinstance(default, int):
                kwargs[field.name] = parse_int(value, default)
            elif isinstance(default, Path):
                kwargs[field.name] = Path(str(value))
            else:
                kwargs[field.name] = str(value)
        return cls(**kwargs)

    def with_overrides(self, **overrides: object) -> "Settings":
        merged = {field.name: getattr(self, field.name) for field in fields(self)}
        merged.update({key: value for key, value in overrides.items() if value is not None})
        return Settings.from_mapping(merged)


def normalize_keys(data: Mapping[str, object]) -> dict:
    normalized = {}
    for key, value in data.items():
        normalized[KEY_ALIASES.get(key, key)] = value
    return normalized


def load_config(path: Path) -> dict:
    if not path.exists():
        return {}
    suffix = path.suffix.lower()
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
    if suffix == ".toml":
        try:
            data = toml.loads(text)
        except toml.TOMLDecodeError as exc:
            raise ConfigError(f"Invalid TOML in config file {path}: {exc}") from exc
    elif suffix in {".yml", ".yaml"}:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in config file {path}: {exc}") from exc
        if data is None:
            return {}
    else:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Invalid JSON in config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config file must contain a mapping: {path}")
    return normalize_keys(data)


def apply_env(config: Mapping[str, object], environ: Optional[Mapping[str, str]] = None) -> dict:
    if environ is None:
        environ = os.environ
    merged = dict(config)
    for key, env_name in ENV_BINDINGS.items():
        if env_name in environ:
            merged[key] = environ[env_name]
    return merged


def resolve_settings(
    config_path: Path, environ: Optional[Mapping[str, str]] = None
) -> Settings:
    return Settings.from_mapping(apply_env(load_config(config_path), environ))


def check_directories(settings: Settings) -> None:
    directories = [settings.markdown_dir]
    if not settings.builtin_templates:
        directories.append(settings.template_dir)
    for directory in directories:
        if not directory.is_dir():
            raise InputError(f"{directory} directory does not exist")
