"""Configuration loading for sls_toolkit."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union
import json
import os

from dotenv import load_dotenv

DEFAULT_MAX_LINES = 500


def load_env() -> None:
    """Load environment variables from a .env file if present."""
    load_dotenv()


def _get_int(value: Optional[str], default: int) -> int:
    if value is None or not value.strip():
        return default
    return int(value)


@dataclass(frozen=True)
class SlsConfig:
    endpoint: str
    project: str
    logstore: str
    access_key_id: str = ""
    access_key_secret: str = ""
    max_lines: int = DEFAULT_MAX_LINES


def from_env() -> SlsConfig:
    load_env()
    return SlsConfig(
        endpoint=os.getenv("SLS_ENDPOINT", ""),
        project=os.getenv("SLS_PROJECT", ""),
        logstore=os.getenv("SLS_LOGSTORE", ""),
        access_key_id=os.getenv("SLS_ACCESS_KEY_ID", os.getenv("ALIYUN_ACCESS_KEY_ID", "")),
        access_key_secret=os.getenv(
            "SLS_ACCESS_KEY_SECRET", os.getenv("ALIYUN_ACCESS_KEY_SECRET", "")
        ),
        max_lines=_get_int(os.getenv("SLS_MAX_LINES"), DEFAULT_MAX_LINES),
    )


def _dict_get(d: Mapping[str, Any], key: str, fallback: Any = None) -> Any:
    if key in d:
        return d[key]
    return fallback


def resolve_config(config: Union[SlsConfig, Mapping[str, Any]]) -> SlsConfig:
    """Accept a config dataclass or a mapping with snake_case or camelCase keys."""
    if isinstance(config, SlsConfig):
        return config
    return SlsConfig(
        endpoint=_dict_get(config, "endpoint", ""),
        project=_dict_get(config, "project", ""),
        logstore=_dict_get(config, "logstore", _dict_get(config, "logStore", "")),
        access_key_id=_dict_get(config, "access_key_id", _dict_get(config, "accessKeyId", "")),
        access_key_secret=_dict_get(
            config, "access_key_secret", _dict_get(config, "accessKeySecret", "")
        ),
        max_lines=int(_dict_get(config, "max_lines", _dict_get(config, "maxLines", DEFAULT_MAX_LINES))),
    )


def settings_from_instance(
    json_data: Union[bytes, str, None],
    secure_json_data: Optional[Mapping[str, str]] = None,
) -> SlsConfig:
    """Build a config from the host's instance settings and decrypted secrets."""
    if not json_data:
        raise ValueError("datasource settings cannot be empty")
    try:
        settings = json.loads(json_data)
    except ValueError as exc:
        raise ValueError(f"could not unmarshal datasource settings json: {exc}") from exc
    if not isinstance(settings, dict):
        raise ValueError("could not unmarshal datasource settings json: expected an object")
    secrets = secure_json_data or {}
    settings["accessKeySecret"] = secrets.get("accessKeySecret", "")
    return resolve_config(settings)
