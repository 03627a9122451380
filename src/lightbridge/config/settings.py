from __future__ import annotations

import json
import os
import tomllib
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, ValidationError

from .paths import default_config_path, default_data_dir, expand_path

CONFIG_ENV_VAR = "LIGHTBRIDGE_CONFIG"

PolicyMode = Literal["blacklist", "whitelist"]


class DatabaseConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    path: str = Field(default_factory=lambda: str(default_data_dir()))


class ScanningConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    broadcast_address: str = "255.255.255.255"
    discovery_port: int = Field(default=48899, ge=1, le=65535)
    control_port: int = Field(default=5577, ge=1, le=65535)
    timeout: float = Field(default=3.0, gt=0)
    rescan_interval: float = Field(default=60.0, gt=0)


class DeviceManagementConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid", "populate_by_name": True}

    blacklisted_unique_ids: tuple[str, ...] = Field(
        default=(), alias="blacklistedUniqueIDs"
    )
    blacklist_or_whitelist: PolicyMode = Field(
        default="blacklist", alias="blacklistOrWhitelist"
    )


class PruningConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid", "populate_by_name": True}

    prune_restarts: int | None = Field(default=None, ge=1, alias="pruneRestarts")


class Settings(BaseModel):
    model_config = {"frozen": True, "extra": "forbid", "populate_by_name": True}

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    scanning: ScanningConfig = Field(default_factory=ScanningConfig)
    device_management: DeviceManagementConfig = Field(
        default_factory=DeviceManagementConfig, alias="deviceManagement"
    )
    pruning: PruningConfig = Field(default_factory=PruningConfig)


def resolve_config_path(allow_missing: bool = False) -> tuple[Path, bool]:
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        path = expand_path(env_path)
        if not allow_missing and not path.exists():
            raise FileNotFoundError(f"{CONFIG_ENV_VAR} points to missing file: {path}")
        return path, path.exists()

    path = default_config_path()
    return path, path.exists()


def load_settings(path: Path) -> Settings:
    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Invalid TOML in config file: {path}\n{exc}") from exc

    try:
        return Settings.model_validate(data or {})
    except ValidationError as exc:
        raise ValueError(f"Invalid config file: {path}\n{exc}") from exc


@lru_cache
def get_settings() -> Settings:
    path, exists = resolve_config_path(allow_missing=False)
    if exists:
        return load_settings(path)
    return Settings()


def data_dir_from_settings(settings: Settings) -> Path:
    return expand_path(settings.database.path)


def _toml_value(value: object) -> str:
    return json.dumps(value)


def render_settings_toml(settings: Settings) -> str:
    scanning = settings.scanning
    management = settings.device_management
    pruning = settings.pruning

    lines = [
        "# lightbridge configuration",
        "",
        "[database]",
        f"path = {_toml_value(settings.database.path)}",
        "",
        "[scanning]",
        f"broadcast_address = {_toml_value(scanning.broadcast_address)}",
        f"discovery_port = {scanning.discovery_port}",
        f"control_port = {scanning.control_port}",
        f"timeout = {scanning.timeout}",
        f"rescan_interval = {scanning.rescan_interval}",
        "",
        "[device_management]",
        "blacklisted_unique_ids = "
        + _toml_value(list(management.blacklisted_unique_ids)),
        f"blacklist_or_whitelist = {_toml_value(management.blacklist_or_whitelist)}",
        "",
        "[pruning]",
    ]
    if pruning.prune_restarts is None:
        lines.append("# prune_restarts = 10")
    else:
        lines.append(f"prune_restarts = {pruning.prune_restarts}")
    lines.append("")
    return "\n".join(lines)


def write_settings(settings: Settings, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_settings_toml(settings))
