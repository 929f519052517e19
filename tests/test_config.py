import pytest
from omegaconf import OmegaConf

from pystipple import InvalidInput, NotFound
from pystipple.config import PyStippleConfig, load_config, validate_config


class TestConfiguration:
    """Test cases for configuration system."""

    def test_default_config(self):
        """Test default configuration creation."""
        cfg = OmegaConf.structured(PyStippleConfig)

        assert cfg.stipple.stipple_count == 5000
        assert cfg.stipple.max_iterations == 50
        assert cfg.stipple.convergence_threshold == 0.1
        assert cfg.stipple.random_seed == 42
        assert cfg.render.disc_radius == 1.0
        assert cfg.logging.level == 'INFO'

    def test_load_config_with_overrides(self):
        """Test configuration with CLI overrides."""
        cfg = load_config(overrides=['stipple.stipple_count=200', 'render.disc_radius=2.5'])

        assert cfg.stipple.stipple_count == 200
        assert cfg.render.disc_radius == 2.5
        assert cfg.stipple.max_iterations == 50

    def test_load_config_from_file(self, tmp_path):
        """Test loading configuration from YAML file."""
        path = tmp_path / 'config.yaml'
        path.write_text("""
stipple:
  stipple_count: 2000
  random_seed: 7
output:
  csv_path: points.csv
""")
        cfg = load_config(str(path), overrides=['stipple.random_seed=8'])
        assert cfg.stipple.stipple_count == 2000
        assert cfg.stipple.random_seed == 8
        assert cfg.output.csv_path == 'points.csv'
        assert cfg.output.render_path == 'stipples.png'

    def test_missing_config_file(self, tmp_path):
        """A named config file must exist."""
        with pytest.raises(NotFound):
            load_config(str(tmp_path / 'missing.yaml'))

    def test_validate_config_valid(self):
        """Test configuration validation with valid values."""
        validate_config(load_config())

    @pytest.mark.parametrize("override", [
        'stipple.stipple_count=0',
        'stipple.max_iterations=-1',
        'stipple.convergence_threshold=-0.5',
        'stipple.contrast=0',
        'render.disc_radius=-1',
        'render.scale_factor=0',
    ])
    def test_validate_config_invalid(self, override):
        """Out of range values are rejected."""
        cfg = load_config(overrides=[override])
        with pytest.raises(InvalidInput):
            validate_config(cfg)
