import pytest
import numpy as np

from pystipple import (
    InvalidInput, InvalidState, RelaxationState, VoronoiStippler, voronoi_stipple
)


def split_image():
    """4x4 image, left two columns black, right two columns white."""
    I = np.full((4, 4), 255, dtype=np.uint8)
    I[:, 0:2] = 0
    return I


def gradient_image(width=24, height=16):
    xs = np.linspace(0, 255, width)
    return np.tile(xs, (height, 1)).astype(np.uint8)


class TestLloydRelaxation:
    """Test cases for the relaxation loop."""

    def test_end_to_end_split(self):
        """Two stipples on a half black image settle in the black half."""
        stippler = VoronoiStippler(split_image(), seed=42)
        stippler.initialize(2)
        assert len(stippler) == 2
        result = stippler.relax(max_iterations=50, threshold=0.1)
        assert result.state == RelaxationState.CONVERGED
        assert stippler.state == RelaxationState.CONVERGED
        assert result.iterations <= 50
        assert result.displacement < 0.1
        X = stippler.generators
        assert np.all(X[:, 0] >= 0) and np.all(X[:, 0] < 2)
        assert np.all(X[:, 1] >= 0) and np.all(X[:, 1] <= 3)

    def test_step_without_generators(self):
        """Stepping before initialization is a state error."""
        stippler = VoronoiStippler(split_image())
        with pytest.raises(InvalidState):
            stippler.step()

    def test_relax_blank_image(self):
        """A blank image has no generators to relax."""
        stippler = VoronoiStippler(np.full((4, 4), 255, dtype=np.uint8))
        stippler.initialize(3)
        with pytest.raises(InvalidState):
            stippler.relax()

    def test_step_deterministic(self):
        """Identical sessions stay identical step after step."""
        a = VoronoiStippler(gradient_image(), seed=5)
        b = VoronoiStippler(gradient_image(), seed=5)
        np.testing.assert_array_equal(a.initialize(30), b.initialize(30))
        for _ in range(3):
            assert a.step() == pytest.approx(b.step())
            np.testing.assert_allclose(a.generators, b.generators)

    def test_count_constant(self):
        """Relaxation never adds or removes generators."""
        stippler = VoronoiStippler(gradient_image(), seed=1)
        stippler.initialize(30)
        stippler.relax(max_iterations=5)
        assert len(stippler) == 30
        xs, ys = stippler.coordinates()
        assert len(xs) == len(ys) == 30

    def test_converged_configuration_stays(self):
        """Relaxing a fixed point moves nothing."""
        stippler = VoronoiStippler(np.full((4, 8), 128, dtype=np.uint8))
        X = np.array([[1.5, 1.5], [5.5, 1.5]])
        stippler.set_generators(X)
        displacement = stippler.step()
        assert displacement < 0.1
        np.testing.assert_allclose(stippler.generators, X, atol=1e-9)
        result = stippler.relax()
        assert result.state == RelaxationState.CONVERGED
        assert result.iterations == 1

    def test_cap_reached(self):
        """A zero threshold never converges and stops at the cap."""
        stippler = VoronoiStippler(gradient_image(), seed=2)
        stippler.initialize(10)
        result = stippler.relax(max_iterations=2, threshold=0.0)
        assert result.state == RelaxationState.CAP_REACHED
        assert result.iterations == 2
        assert stippler.iteration == 2

    def test_callback_and_cancel(self):
        """A callback sees every step and can cancel the loop."""
        stippler = VoronoiStippler(gradient_image(), seed=2)
        stippler.initialize(10)
        seen = []

        def callback(iteration, displacement):
            seen.append((iteration, displacement))
            return len(seen) < 2

        result = stippler.relax(max_iterations=10, threshold=0.0, callback=callback)
        assert result.state == RelaxationState.CANCELLED
        assert result.iterations == 2
        assert [it for it, _ in seen] == [1, 2]
        assert stippler.generators.shape == (10, 2)

    def test_cancel_then_resume(self):
        """Cancelling leaves the generators valid and steppable."""
        stippler = VoronoiStippler(gradient_image(), seed=2)
        stippler.initialize(10)
        stippler.step()
        stippler.cancel()
        assert stippler.state == RelaxationState.CANCELLED
        before = stippler.generators
        stippler.step()
        assert stippler.state == RelaxationState.ITERATING
        assert stippler.generators.shape == before.shape

    def test_invalid_arguments(self):
        """Nonsense iteration caps and thresholds are rejected."""
        stippler = VoronoiStippler(split_image())
        stippler.initialize(2)
        with pytest.raises(InvalidInput):
            stippler.relax(max_iterations=0)
        with pytest.raises(InvalidInput):
            stippler.relax(threshold=-1)

    def test_set_generators_validates(self):
        """Replacement generators must be finite (N, 2) coordinates."""
        stippler = VoronoiStippler(split_image())
        with pytest.raises(InvalidInput):
            stippler.set_generators([[1.0, 2.0, 3.0]])
        with pytest.raises(InvalidInput):
            stippler.set_generators([[np.nan, 1.0]])

    def test_render_defaults_to_image_size(self):
        """The session renders on a canvas the size of the image."""
        stippler = VoronoiStippler(gradient_image(24, 16))
        stippler.initialize(5)
        raster = stippler.render()
        assert raster.shape == (16, 24)
        assert np.any(raster == 0)


class TestVoronoiStipple:
    """Test cases for the one-call pipeline."""

    def test_pipeline(self):
        """The pipeline returns stipples inside the image."""
        X = voronoi_stipple(gradient_image(), 20, n_iters=5, seed=3)
        assert X.shape == (20, 2)
        assert np.all(X[:, 0] >= 0) and np.all(X[:, 0] < 24)
        assert np.all(X[:, 1] >= 0) and np.all(X[:, 1] < 16)

    def test_blank_pipeline(self):
        """A blank image gives no stipples rather than an error."""
        X = voronoi_stipple(np.full((5, 5), 255, dtype=np.uint8), 4)
        assert X.shape == (0, 2)
