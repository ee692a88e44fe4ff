"""
This module defines the data structures for our JSON-based S3 stack builder.
The dataclasses are the fixed-shape schema of the developer's config document;
load_config reads the document and decodes it strictly into them.
"""

import json
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

import pulumi
import yaml

DEFAULT_CONFIG_FILE = "config.json"
YAML_SUFFIXES = (".yaml", ".yml")


class ConfigError(Exception):
    """Base class for errors raised while loading the config document."""


class ConfigReadError(ConfigError):
    """The config document could not be read."""


class ConfigParseError(ConfigError, ValueError):
    """The config document is malformed or does not match the schema."""


def _check_keys(data: Any, required: tuple, section: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise ConfigParseError(f"Configuration section '{section}' must be an object")

    for key in required:
        if key not in data:
            raise ConfigParseError(f"Missing required configuration key: {section}.{key}")

    unknown = sorted(map(str, set(data) - set(required)))
    if unknown:
        raise ConfigParseError(f"Unknown configuration keys in '{section}': {', '.join(unknown)}")

    return data


def _require_str(data: Dict[str, Any], key: str, section: str) -> str:
    value = data[key]
    if not isinstance(value, str) or not value.strip():
        raise ConfigParseError(f"Configuration key {section}.{key} must be a non-empty string")
    return value


def _require_bool(data: Dict[str, Any], key: str, section: str) -> bool:
    value = data[key]
    # bool only; "true" or 1 are rejected rather than coerced
    if not isinstance(value, bool):
        raise ConfigParseError(f"Configuration key {section}.{key} must be a boolean")
    return value


@dataclass(frozen=True)
class StorageConfig:
    bucket_name: str
    enable_versioning: bool

    KEYS = ("bucket_name", "enable_versioning")

    @classmethod
    def from_dict(cls, data: Any) -> "StorageConfig":
        data = _check_keys(data, cls.KEYS, "storage")
        return cls(
            bucket_name=_require_str(data, "bucket_name", "storage"),
            enable_versioning=_require_bool(data, "enable_versioning", "storage"),
        )


@dataclass(frozen=True)
class Config:
    """
    What the developer writes in config.json.

    Attributes:
        project: Project name, first segment of every derived name.
        environment: Deployment environment (dev, prod, ...).
        region: AWS region the provider is pinned to.
        storage: Settings of the project's S3 bucket.
    """

    project: str
    environment: str
    region: str
    storage: StorageConfig

    KEYS = ("project", "environment", "region", "storage")

    @classmethod
    def from_dict(cls, data: Any) -> "Config":
        data = _check_keys(data, cls.KEYS, "config")
        return cls(
            project=_require_str(data, "project", "config"),
            environment=_require_str(data, "environment", "config"),
            region=_require_str(data, "region", "config"),
            storage=StorageConfig.from_dict(data["storage"]),
        )


def config_file_path(base_dir: Optional[str] = None) -> str:
    """Location of the config document; the `configFile` stack setting overrides the default."""
    file_path = pulumi.Config().get("configFile") or DEFAULT_CONFIG_FILE
    if base_dir and not os.path.isabs(file_path):
        file_path = os.path.join(base_dir, file_path)
    return file_path


def parse_config(text: Union[str, bytes], file_path: str = DEFAULT_CONFIG_FILE) -> Config:
    try:
        if isinstance(text, bytes):
            text = text.decode("utf-8")
        if file_path.lower().endswith(YAML_SUFFIXES):
            config_data = yaml.safe_load(text)
        else:
            config_data = json.loads(text)
    except (UnicodeDecodeError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigParseError(f"Error parsing {file_path}: {e}") from e

    return Config.from_dict(config_data)


def load_config(file_path: str) -> Config:
    """Read and strictly decode the config document at the given path."""
    try:
        with open(file_path, "rb") as file:
            content = file.read()
    except OSError as e:
        raise ConfigReadError(f"Error reading {file_path}: {e}") from e

    return parse_config(content, file_path)
