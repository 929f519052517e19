from dataclasses import dataclass, field
from typing import List, Optional
import os

from omegaconf import DictConfig, OmegaConf

from .errors import InvalidInput, NotFound


@dataclass
class StippleConfig:
    stipple_count: int = 5000
    max_iterations: int = 50
    convergence_threshold: float = 0.1  # Mean displacement in pixels
    random_seed: int = 42
    contrast: float = 1.0


@dataclass
class RenderConfig:
    disc_radius: float = 1.0
    scale_factor: float = 1.0  # Applied to exported coordinates and the render canvas


@dataclass
class OutputConfig:
    render_path: str = 'stipples.png'
    csv_path: str = 'stipples.csv'


@dataclass
class LoggingConfig:
    level: str = 'INFO'


@dataclass
class PyStippleConfig:
    stipple: StippleConfig = field(default_factory=StippleConfig)
    render: RenderConfig = field(default_factory=RenderConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(config_path: Optional[str] = None, overrides: Optional[List[str]] = None) -> DictConfig:
    """Load configuration from a YAML file with optional dotlist overrides."""
    cfg = OmegaConf.structured(PyStippleConfig)
    if config_path:
        if not os.path.exists(config_path):
            raise NotFound(f"Config file not found: {config_path}")
        cfg = OmegaConf.merge(cfg, OmegaConf.load(config_path))
    if overrides:
        cfg = OmegaConf.merge(cfg, OmegaConf.from_dotlist(overrides))
    return cfg


def validate_config(cfg: DictConfig) -> None:
    """Validate configuration values."""
    checks = [
        (cfg.stipple.stipple_count > 0, "stipple.stipple_count must be positive"),
        (cfg.stipple.max_iterations > 0, "stipple.max_iterations must be positive"),
        (cfg.stipple.convergence_threshold >= 0, "stipple.convergence_threshold must be non-negative"),
        (cfg.stipple.contrast > 0, "stipple.contrast must be positive"),
        (cfg.render.disc_radius >= 0, "render.disc_radius must be non-negative"),
        (cfg.render.scale_factor > 0, "render.scale_factor must be positive"),
    ]
    for ok, message in checks:
        if not ok:
            raise InvalidInput(message)
