"""Configuration loading for Mojo Writer."""

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from dotenv import load_dotenv

from .errors import ConfigError
from .io.file_handler import FileHandler

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILENAME = "mojowriter.yaml"

DEFAULT_GENRES = ["Fantasy", "Sci-Fi", "Mystery", "Thriller", "Romance", "Historical Fiction"]


@dataclass
class Config:
    """Central configuration for the application."""

    # API settings
    api_key: str = field(default_factory=lambda: os.getenv("ANTHROPIC_API_KEY", ""))
    model: str = "claude-opus-4-20250514"
    fast_model: str = "claude-3-5-sonnet-20241022"
    max_tokens: int = 8000

    # Storage
    data_dir: Path = field(default_factory=lambda: Path.home() / ".mojowriter")

    # Editing
    history_limit: Optional[int] = None
    pane_widths: List[float] = field(default_factory=lambda: [25.0, 35.0, 40.0])
    pane_min_px: List[int] = field(default_factory=lambda: [250, 300, 350])
    container_width: int = 1000
    genres: List[str] = field(default_factory=lambda: list(DEFAULT_GENRES))

    def __post_init__(self):
        self.data_dir = Path(self.data_dir).expanduser()
        self.validate()

    def validate(self) -> None:
        """Check value ranges and raise ConfigError on the first problem."""
        if self.history_limit is not None and self.history_limit < 1:
            raise ConfigError(f"history_limit must be positive, got {self.history_limit}")
        if len(self.pane_widths) != len(self.pane_min_px):
            raise ConfigError("pane_widths and pane_min_px must have the same length")
        if len(self.pane_widths) < 2:
            raise ConfigError("At least two panes are required")
        if abs(sum(self.pane_widths) - 100.0) > 1e-6:
            raise ConfigError(f"pane_widths must sum to 100, got {sum(self.pane_widths)}")
        if any(width < 0 for width in self.pane_min_px):
            raise ConfigError("pane_min_px values must not be negative")
        if self.max_tokens <= 0:
            raise ConfigError("max_tokens must be positive")

    @property
    def chapters_dir(self) -> Path:
        return self.data_dir / "chapters"

    @property
    def projects_file(self) -> Path:
        return self.data_dir / "projects.json"


def load_config(config_path: Optional[Union[str, Path]] = None) -> Config:
    """
    Build a Config from defaults, an optional YAML file and the environment.

    The YAML file is looked up at ``config_path`` or, when not given,
    ``./mojowriter.yaml``. Environment variables win over the file.
    """
    load_dotenv()

    values: Dict[str, Any] = {}
    path = Path(config_path) if config_path else Path.cwd() / DEFAULT_CONFIG_FILENAME
    if path.exists():
        try:
            loaded = FileHandler().read_yaml(path) or {}
        except Exception as e:
            raise ConfigError(f"Failed to read config file {path}: {e}") from e
        if not isinstance(loaded, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")

        known = {f.name for f in fields(Config)}
        for key, value in loaded.items():
            if key in known:
                values[key] = value
            else:
                logger.warning(f"Ignoring unknown config key: {key}")
        logger.debug(f"Loaded config from {path}")
    elif config_path:
        raise ConfigError(f"Config file not found: {path}")

    # Environment overrides
    if os.getenv("MOJOWRITER_MODEL"):
        values["model"] = os.environ["MOJOWRITER_MODEL"]
    if os.getenv("MOJOWRITER_DATA_DIR"):
        values["data_dir"] = os.environ["MOJOWRITER_DATA_DIR"]
    if os.getenv("ANTHROPIC_API_KEY") and "api_key" not in values:
        values["api_key"] = os.environ["ANTHROPIC_API_KEY"]

    try:
        return Config(**values)
    except TypeError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
