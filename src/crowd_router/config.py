"""
Crowd Router Configuration
==========================

This module handles configuration loading for the crowd router.

Configuration Sources (in order of precedence):
    1. Environment variables (highest priority)
    2. config.yaml file
    3. Default values (lowest priority)

Environment Variable Mapping:
    CROWD_ROUTER_PROVIDER_URL     -> provider.base_url
    CROWD_ROUTER_PROVIDER_PROFILE -> provider.profile
    CROWD_ROUTER_PROVIDER_TIMEOUT -> provider.timeout_seconds
    CROWD_ROUTER_BRANCH_TIMEOUT   -> routing.branch_timeout_seconds
    CROWD_ROUTER_GRID_SIZE        -> grid.grid_size
    CROWD_ROUTER_PORT             -> server.port
    CROWD_ROUTER_LOG_LEVEL        -> logging.level
    PORT                          -> server.port (Cloud Run)

Example:
    from crowd_router.config import settings

    print(settings.provider.base_url)
    print(settings.grid.grid_size)
"""

import os
import logging
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field


logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Models
# =============================================================================

class AppConfig(BaseModel):
    """Service identification configuration."""

    name: str = Field(default="crowd-router", description="Service name")
    version: str = Field(default="v0.1.0", description="API version")


class ProviderConfig(BaseModel):
    """External routing provider configuration."""

    base_url: str = Field(
        default="https://router.project-osrm.org",
        description="Root URL of the OSRM-compatible routing provider",
    )
    profile: str = Field(
        default="driving",
        description="Routing profile: 'driving', 'walking' or 'cycling'",
    )
    timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="HTTP timeout for a single provider request",
    )


class RoutingConfig(BaseModel):
    """Candidate generation configuration."""

    branch_timeout_seconds: float = Field(
        default=15.0,
        gt=0,
        description="Time allowed for each candidate branch (direct, avoidance, alternative)",
    )


class SeedCrowd(BaseModel):
    """Crowd entry loaded into the grid at startup."""

    lat: float = Field(..., ge=-90, le=90, description="Latitude")
    lng: float = Field(..., ge=-180, le=180, description="Longitude")
    count: int = Field(default=1, ge=0, description="People at the location (0 = skipped)")


class GridConfig(BaseModel):
    """Population grid configuration."""

    grid_size: float = Field(
        default=0.0005,
        gt=0,
        description="Cell size in degrees",
    )
    seed_crowds: List[SeedCrowd] = Field(
        default_factory=list,
        description="Crowd entries loaded at startup",
    )


class ServerConfig(BaseModel):
    """Server configuration."""

    host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(default=8002, ge=1, le=65535, description="Bind port")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="json", description="Log format: json or text")


class Settings(BaseModel):
    """
    Main settings class for the crowd router.

    Loads configuration from YAML file and environment variables.
    Environment variables take precedence over file values.
    """

    app: AppConfig = Field(default_factory=AppConfig)
    provider: ProviderConfig = Field(default_factory=ProviderConfig)
    routing: RoutingConfig = Field(default_factory=RoutingConfig)
    grid: GridConfig = Field(default_factory=GridConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config(config_path: Optional[str] = None) -> Settings:
    """
    Load configuration from YAML file and environment variables.

    Priority (highest to lowest):
        1. Environment variables
        2. YAML config file
        3. Default values

    Args:
        config_path: Path to config.yaml. If None, searches common locations.

    Returns:
        Settings: Loaded configuration
    """
    # Find config file
    if config_path is None:
        search_paths = [
            Path(os.environ.get("CROWD_ROUTER_CONFIG", "config.yaml")),
            Path("config.yml"),
            Path(__file__).parent.parent.parent / "config.yaml",
        ]
        for path in search_paths:
            if path.exists():
                config_path = str(path)
                break

    # Load from YAML if exists
    config_data = {}
    if config_path and Path(config_path).exists():
        logger.info(f"Loading config from: {config_path}")
        with open(config_path, "r") as f:
            config_data = yaml.safe_load(f) or {}
    else:
        logger.warning("No config file found, using defaults and environment variables")

    # Apply environment variable overrides
    _apply_env_overrides(config_data)

    return Settings.model_validate(config_data)


def _apply_env_overrides(config_data: dict) -> None:
    """Apply environment variable overrides to config data."""

    # Provider settings
    if env_url := os.environ.get("CROWD_ROUTER_PROVIDER_URL"):
        config_data.setdefault("provider", {})["base_url"] = env_url
    if env_profile := os.environ.get("CROWD_ROUTER_PROVIDER_PROFILE"):
        config_data.setdefault("provider", {})["profile"] = env_profile
    if env_timeout := os.environ.get("CROWD_ROUTER_PROVIDER_TIMEOUT"):
        config_data.setdefault("provider", {})["timeout_seconds"] = float(env_timeout)

    # Routing settings
    if env_branch := os.environ.get("CROWD_ROUTER_BRANCH_TIMEOUT"):
        config_data.setdefault("routing", {})["branch_timeout_seconds"] = float(env_branch)

    # Grid settings
    if env_grid := os.environ.get("CROWD_ROUTER_GRID_SIZE"):
        config_data.setdefault("grid", {})["grid_size"] = float(env_grid)

    # Server settings (Cloud Run uses PORT env var)
    if env_port := os.environ.get("PORT"):
        config_data.setdefault("server", {})["port"] = int(env_port)
    elif env_port := os.environ.get("CROWD_ROUTER_PORT"):
        config_data.setdefault("server", {})["port"] = int(env_port)

    # Logging settings
    if env_log := os.environ.get("CROWD_ROUTER_LOG_LEVEL"):
        config_data.setdefault("logging", {})["level"] = env_log


def setup_logging(settings: Settings) -> None:
    """Configure logging based on settings."""
    log_level = getattr(logging, settings.logging.level.upper(), logging.INFO)

    if settings.logging.format == "json":
        log_format = '{"time": "%(asctime)s", "level": "%(levelname)s", "module": "%(name)s", "message": "%(message)s"}'
    else:
        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
    )


# =============================================================================
# Global Settings Instance
# =============================================================================

# Global settings instance - loaded on import
settings = load_config()
setup_logging(settings)
