"""Configuration management for wiggum.

Configuration is read once, at `wiggum init`, and copied into the Status
Document. Editing config.toml afterwards does not change a running session.
"""

import tomllib
from pathlib import Path

import tomli_w
from pydantic import BaseModel, Field, ValidationError

from .constants import CONFIG_FILE


class ConfigError(Exception):
    """Configuration file could not be read or validated."""


class LimitsConfig(BaseModel):
    """Enforcement thresholds copied into the status document."""

    max_iterations_per_chunk: int = Field(default=5, ge=1)
    max_gate_failures: int = Field(default=3, ge=1)


class SessionConfig(BaseModel):
    """Session-level defaults."""

    max_iterations: int = Field(default=5, ge=1)
    max_task_attempts: int = Field(default=3, ge=1)


class GatesConfig(BaseModel):
    """Command used for each quality gate. Empty means not configured."""

    test: str = ""
    lint: str = ""
    typecheck: str = ""
    build: str = ""
    format: str = ""

    def commands(self) -> dict[str, str]:
        """Get configured gate commands as {gate: command}."""
        return {name: cmd for name, cmd in self.model_dump().items() if cmd}


class DashboardConfig(BaseModel):
    """Configuration for the status dashboard."""

    refresh_interval: float = Field(default=0.25, gt=0, le=5)
    auto_launch: bool = True


class WiggumConfig(BaseModel):
    """Root configuration for wiggum."""

    limits: LimitsConfig = Field(default_factory=LimitsConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)
    gates: GatesConfig = Field(default_factory=GatesConfig)
    dashboard: DashboardConfig = Field(default_factory=DashboardConfig)


def load_config(wiggum_dir: Path) -> WiggumConfig:
    """Load config from .wiggum/config.toml.

    Args:
        wiggum_dir: Path to .wiggum directory

    Returns:
        Loaded configuration, or defaults if config.toml doesn't exist

    Raises:
        ConfigError: If the file is not valid TOML or fails validation
    """
    config_path = wiggum_dir / CONFIG_FILE
    if not config_path.exists():
        return WiggumConfig()
    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
        return WiggumConfig.model_validate(data)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {config_path}: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {config_path}: {e}") from e


def write_config_template(wiggum_dir: Path) -> Path:
    """Write default config.toml template.

    Args:
        wiggum_dir: Path to .wiggum directory

    Returns:
        Path to the written config file
    """
    config_path = wiggum_dir / CONFIG_FILE
    template = {
        "limits": {"max_iterations_per_chunk": 5, "max_gate_failures": 3},
        "session": {"max_iterations": 5, "max_task_attempts": 3},
        # Leave a gate empty to show it as "---" on the dashboard
        "gates": {
            "test": "pytest tests/ -q",
            "lint": "ruff check .",
            "typecheck": "pyright",
            "build": "",
            "format": "ruff format --check .",
        },
        "dashboard": {"refresh_interval": 0.25, "auto_launch": True},
    }
    wiggum_dir.mkdir(parents=True, exist_ok=True)
    with open(config_path, "wb") as f:
        tomli_w.dump(template, f)
    return config_path
