"""
Discovery service configuration.

Loaded from a YAML file (nested keys, e.g. ``discovery.subnet-ranges``)
with environment variable overrides, or from the environment alone.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .subnet import parse_subnet_list

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("/etc/helpdesk/discovery.yaml")

# (section, key) in YAML -> field name
_YAML_KEYS: dict[tuple[str, str], str] = {
    ("discovery", "enabled"): "enabled",
    ("discovery", "subnet-ranges"): "subnet_ranges",
    ("discovery", "scan-interval"): "scan_interval_ms",
    ("discovery", "max-concurrent-hosts"): "max_concurrent_hosts",
    ("discovery", "max-hosts-per-subnet"): "max_hosts_per_subnet",
    ("snmp", "community"): "snmp_community",
    ("snmp", "timeout"): "snmp_timeout_ms",
    ("snmp", "retries"): "snmp_retries",
    ("probe", "timeout"): "probe_timeout",
    ("probe", "max-concurrent"): "max_concurrent_probes",
    ("paths", "db"): "db_path",
    ("api", "host"): "api_host",
    ("api", "port"): "api_port",
}

_ENV_KEYS: dict[str, str] = {
    "DISCOVERY_ENABLED": "enabled",
    "DISCOVERY_SUBNET_RANGES": "subnet_ranges",
    "DISCOVERY_SCAN_INTERVAL": "scan_interval_ms",
    "DISCOVERY_MAX_CONCURRENT_HOSTS": "max_concurrent_hosts",
    "DISCOVERY_MAX_HOSTS_PER_SUBNET": "max_hosts_per_subnet",
    "SNMP_COMMUNITY": "snmp_community",
    "SNMP_TIMEOUT": "snmp_timeout_ms",
    "SNMP_RETRIES": "snmp_retries",
    "PROBE_TIMEOUT": "probe_timeout",
    "PROBE_MAX_CONCURRENT": "max_concurrent_probes",
    "DB_PATH": "db_path",
    "API_HOST": "api_host",
    "API_PORT": "api_port",
    "LOG_LEVEL": "log_level",
}


class DiscoveryConfig(BaseModel):
    """Configuration for network discovery."""

    # ========================================================================
    # Discovery
    # ========================================================================

    enabled: bool = Field(
        default=True,
        description="Run scheduled discovery scans"
    )

    subnet_ranges: list[str] = Field(
        default_factory=lambda: ["192.168.1.0/24"],
        description="CIDR ranges to sweep (comma-separated string or list)"
    )

    scan_interval_ms: int = Field(
        default=3_600_000,
        ge=1000,
        description="Interval between scheduled scans in milliseconds"
    )

    max_concurrent_hosts: int = Field(
        default=10,
        ge=1,
        le=256,
        description="Hosts interrogated over SNMP at the same time"
    )

    max_hosts_per_subnet: int = Field(
        default=65_534,
        ge=1,
        description="Largest range (in hosts) a single subnet may cover"
    )

    # ========================================================================
    # SNMP
    # ========================================================================

    snmp_community: str = Field(
        default="public",
        description="SNMP v2c community string"
    )

    snmp_timeout_ms: int = Field(
        default=5000,
        ge=100,
        description="Timeout per SNMP GET in milliseconds"
    )

    snmp_retries: int = Field(
        default=2,
        ge=0,
        le=10,
        description="Retries per SNMP GET"
    )

    # ========================================================================
    # Reachability
    # ========================================================================

    probe_timeout: int = Field(
        default=1,
        ge=1,
        le=30,
        description="Per-host ping timeout in seconds"
    )

    max_concurrent_probes: int = Field(
        default=64,
        ge=1,
        le=1024,
        description="Concurrent ping probes in the fallback strategy"
    )

    # ========================================================================
    # Storage / API / Logging
    # ========================================================================

    db_path: Path = Field(
        default=Path("/var/lib/helpdesk/equipment.db"),
        description="SQLite equipment inventory"
    )

    api_host: str = Field(default="127.0.0.1")
    api_port: int = Field(default=8085, ge=1, le=65535)

    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)"
    )

    model_config = ConfigDict(
        validate_assignment=True,
        extra='forbid'
    )

    @field_validator('subnet_ranges', mode='before')
    @classmethod
    def split_subnet_ranges(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            return parse_subnet_list(v)
        return [str(item).strip() for item in v if str(item).strip()]

    @field_validator('enabled', mode='before')
    @classmethod
    def parse_enabled(cls, v):
        if isinstance(v, str):
            return v.strip().lower() not in ('false', '0', 'no', 'off')
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        if v.upper() not in ['DEBUG', 'INFO', 'WARNING', 'ERROR']:
            raise ValueError('log_level must be DEBUG, INFO, WARNING, or ERROR')
        return v.upper()

    @property
    def scan_interval_seconds(self) -> float:
        return self.scan_interval_ms / 1000.0

    @property
    def snmp_timeout_seconds(self) -> float:
        return self.snmp_timeout_ms / 1000.0


def _flatten_yaml(data: dict[str, Any]) -> dict[str, Any]:
    """Map nested YAML sections onto flat config fields."""
    flat: dict[str, Any] = {}
    for (section, key), field_name in _YAML_KEYS.items():
        block = data.get(section)
        if isinstance(block, dict) and key in block:
            flat[field_name] = block[key]
    if "log_level" in data:
        flat["log_level"] = data["log_level"]
    return flat


def _env_overrides(environ: Optional[dict[str, str]] = None) -> dict[str, Any]:
    environ = os.environ if environ is None else environ
    overrides = {}
    for env_name, field_name in _ENV_KEYS.items():
        value = environ.get(env_name)
        if value is not None:
            overrides[field_name] = value
            logger.info(f"Environment override: {field_name}")
    return overrides


def load_config_from_env(environ: Optional[dict[str, str]] = None) -> DiscoveryConfig:
    """Load configuration from environment variables only."""
    return DiscoveryConfig(**_env_overrides(environ))


def load_config(
    config_path: Optional[Path] = None,
    environ: Optional[dict[str, str]] = None,
) -> DiscoveryConfig:
    """
    Load configuration from YAML file with environment overrides.

    A missing file falls back to defaults plus environment.

    Raises:
        ValueError: If the config is invalid
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    config_dict: dict[str, Any] = {}
    if config_path.exists():
        logger.info(f"Loading config from {config_path}")
        with open(config_path, 'r') as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file must contain a mapping: {config_path}")
        config_dict = _flatten_yaml(data)
    else:
        logger.warning(f"Config file not found: {config_path}, using defaults")

    config_dict.update(_env_overrides(environ))
    return DiscoveryConfig(**config_dict)
