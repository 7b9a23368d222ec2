"""
DriftStack Configuration
========================

This module handles configuration loading for frame stack processing.

Configuration Sources (in order of precedence):
    1. Command-line flags (applied by the CLI)
    2. Environment variables
    3. drift_stack.yaml / config.yaml file
    4. Default values (lowest priority)

Environment Variable Mapping:
    DRIFT_STACK_WIDTH            -> frames.width
    DRIFT_STACK_HEIGHT           -> frames.height
    DRIFT_STACK_STABILITY_BOUND  -> drift.stability_bound
    DRIFT_STACK_RESOLUTION       -> analysis.resolution
    DRIFT_STACK_KEEP_RATE        -> analysis.keep_rate
    DRIFT_STACK_LOG_LEVEL        -> logging.level

Example:
    from drift_stack.config import load_config
    
    settings = load_config()
    print(settings.frames.width)
    print(settings.drift.stability_bound)
"""

import os
import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field


logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Models
# =============================================================================

class FramesConfig(BaseModel):
    """Raw frame geometry."""
    
    width: int = Field(default=2048, ge=1, description="Pixels per row")
    height: int = Field(default=2048, ge=1, description="Rows per frame")


class DriftConfig(BaseModel):
    """Drift detection configuration."""
    
    stability_bound: int = Field(
        default=100,
        ge=1,
        description="Frames with |dx| or |dy| at or above this are excluded",
    )
    include_reference: bool = Field(
        default=False,
        description="Emit a (0, 0, 0) record for the reference frame",
    )


class AnalysisConfig(BaseModel):
    """Single-frame analysis configuration."""
    
    resolution: int = Field(
        default=512,
        ge=1,
        description="Side of the reduced analysis image",
    )
    keep_rate: float = Field(
        default=0.01,
        gt=0,
        le=1.0,
        description="Fraction of reduced pixels kept as signal (0, 1]",
    )


class OutputConfig(BaseModel):
    """Output file configuration."""
    
    atomic_writes: bool = Field(
        default=True,
        description="Write to a temporary file and rename into place",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""
    
    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="text", description="Log format: json or text")


class Settings(BaseModel):
    """
    Main settings class for DriftStack.
    
    Loads configuration from YAML file and environment variables.
    Environment variables take precedence over file values.
    """
    
    frames: FramesConfig = Field(default_factory=FramesConfig)
    drift: DriftConfig = Field(default_factory=DriftConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
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
        config_path: Path to a YAML file. If None, searches the working
            directory for drift_stack.yaml and config.yaml.
        
    Returns:
        Settings: Loaded configuration
        
    Raises:
        FileNotFoundError: If an explicit config_path does not exist
        pydantic.ValidationError: If a value is invalid
        ValueError: If the file is not a YAML mapping or an env value is malformed
    """
    if config_path is not None and not Path(config_path).exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    
    # Find config file
    if config_path is None:
        for path in (Path("drift_stack.yaml"), Path("config.yaml")):
            if path.exists():
                config_path = str(path)
                break
    
    # Load from YAML if exists
    config_data = {}
    if config_path:
        logger.info(f"Loading config from: {config_path}")
        with open(config_path, "r") as f:
            config_data = yaml.safe_load(f) or {}
        if not isinstance(config_data, dict):
            raise ValueError(f"Config file {config_path} must contain a mapping")
    else:
        logger.debug("No config file found, using defaults and environment variables")
    
    # Apply environment variable overrides
    _apply_env_overrides(config_data)
    
    return Settings.model_validate(config_data)


def _apply_env_overrides(config_data: dict) -> None:
    """Apply environment variable overrides to config data."""
    
    # Frame geometry
    if env_width := os.environ.get("DRIFT_STACK_WIDTH"):
        config_data.setdefault("frames", {})["width"] = int(env_width)
    if env_height := os.environ.get("DRIFT_STACK_HEIGHT"):
        config_data.setdefault("frames", {})["height"] = int(env_height)
    
    # Drift detection
    if env_bound := os.environ.get("DRIFT_STACK_STABILITY_BOUND"):
        config_data.setdefault("drift", {})["stability_bound"] = int(env_bound)
    
    # Analysis
    if env_res := os.environ.get("DRIFT_STACK_RESOLUTION"):
        config_data.setdefault("analysis", {})["resolution"] = int(env_res)
    if env_rate := os.environ.get("DRIFT_STACK_KEEP_RATE"):
        config_data.setdefault("analysis", {})["keep_rate"] = float(env_rate)
    
    # Logging settings
    if env_log := os.environ.get("DRIFT_STACK_LOG_LEVEL"):
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
