"""Configuration loading and management."""

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

CORRELATION_WINDOWS = ("session", "round")


@dataclass
class ReconstructionConfig:
    correlation_window: str = "session"
    keep_preamble: bool = True


@dataclass
class DisplayConfig:
    input_preview_length: int = 80
    output_preview_length: int = 2000


@dataclass
class LoggingConfig:
    level: str = "INFO"
    log_dir: Path = field(default_factory=lambda: Path.home() / ".session-rounds" / "logs")
    console: bool = True


@dataclass
class Config:
    projects_dir: Path = field(default_factory=lambda: Path.home() / ".claude" / "projects")
    reconstruction: ReconstructionConfig = field(default_factory=ReconstructionConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def expand_env_var(value: str) -> str:
    """Expand environment variables in string (e.g. ${VAR})."""
    if value.startswith("${") and value.endswith("}"):
        env_var = value[2:-1]
        return os.environ.get(env_var, value)
    return value


def expand_path(path_str: str) -> Path:
    """Expand ~ and environment variables in path."""
    return Path(os.path.expandvars(os.path.expanduser(path_str)))


def load_config(config_path: Path | None = None) -> Config:
    """Load configuration from YAML file."""
    if config_path is None:
        # Look for config in standard locations
        search_paths = [
            Path.cwd() / "session-rounds.yaml",
            Path.home() / ".config" / "session-rounds" / "config.yaml",
            Path("/etc/session-rounds/config.yaml"),
        ]
        for path in search_paths:
            if path.exists():
                config_path = path
                break

    if config_path is None or not config_path.exists():
        return Config()

    with open(config_path) as f:
        data = yaml.safe_load(f) or {}

    # Parse reconstruction config
    recon_data = data.get("reconstruction", {})
    window = recon_data.get("correlation_window", "session")
    if window not in CORRELATION_WINDOWS:
        raise ValueError(
            f"Invalid correlation_window {window!r}, expected one of {CORRELATION_WINDOWS}"
        )
    reconstruction = ReconstructionConfig(
        correlation_window=window,
        keep_preamble=bool(recon_data.get("keep_preamble", True)),
    )

    # Parse display config
    display_data = data.get("display", {})
    display = DisplayConfig(
        input_preview_length=int(display_data.get("input_preview_length", 80)),
        output_preview_length=int(display_data.get("output_preview_length", 2000)),
    )

    # Parse logging config
    log_data = data.get("logging", {})
    logging_config = LoggingConfig(
        level=expand_env_var(str(log_data.get("level", "INFO"))).upper(),
        log_dir=expand_path(log_data.get("log_dir", "~/.session-rounds/logs")),
        console=bool(log_data.get("console", True)),
    )

    return Config(
        projects_dir=expand_path(data.get("projects_dir", "~/.claude/projects")),
        reconstruction=reconstruction,
        display=display,
        logging=logging_config,
    )
