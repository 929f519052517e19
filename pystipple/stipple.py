"""
Weighted Voronoi stippling [1]

[1] Adrian Secord. Weighted Voronoi Stippling.
    2nd International Symposium on Non-Photorealistic Animation
    and Rendering (NPAR 2002)
"""
import enum
import logging
import numbers
from collections import namedtuple

import numpy as np
from numba import jit

from .errors import InvalidInput, InvalidState
from .render import render_stipples

logger = logging.getLogger(__name__)

DEFAULT_SEED = 42
DEFAULT_MAX_ITERATIONS = 50
DEFAULT_THRESHOLD = 0.1
ATTEMPTS_PER_STIPPLE = 100

LUMINANCE = np.array([0.299, 0.587, 0.114])


def to_grayscale(I):
    """
    Convert an RGB/RGBA or grayscale image to luminance

    Parameters
    ----------
    I: ndarray(M, N) or ndarray(M, N, 1|3|4)
        An image, either 8-bit or floating point in the range [0, 1]

    Returns
    -------
    ndarray(M, N)
        Luminance in the range [0, 1]
    """
    I = np.asarray(I)
    if I.ndim not in (2, 3) or I.shape[0] == 0 or I.shape[1] == 0:
        raise InvalidInput(
            "Expected a non-empty (height, width[, channels]) image, got shape {}".format(I.shape))
    if I.ndim == 3 and I.shape[2] not in (1, 3, 4):
        raise InvalidInput("Unsupported channel count {}".format(I.shape[2]))
    if np.issubdtype(I.dtype, np.integer):
        I = np.array(I, dtype=float)/255
    else:
        I = np.array(I, dtype=float)
        if not np.all(np.isfinite(I)):
            raise InvalidInput("Image contains non-finite samples")
        if np.max(I) > 1:
            I /= 255
    if I.ndim == 3:
        if I.shape[2] == 1:
            I = I[:, :, 0]
        else:
            # Cut off alpha channel
            I = I[:, :, 0:3].dot(LUMINANCE)
    return np.clip(I, 0, 1)


def get_density(I, contrast=1):
    """
    Create per-pixel weights based on image brightness.  Darker
    pixels get higher weights

    Parameters
    ----------
    I: ndarray(M, N) or ndarray(M, N, 1|3|4)
        An RGB/RGBA or grayscale image
    contrast: float
        Contrast boost, apply weights^(1/contrast)

    Returns
    -------
    ndarray(M, N)
        The weights of each pixel, in the range [0, 1]
    """
    if not contrast > 0:
        raise InvalidInput("contrast must be positive, got {}".format(contrast))
    weights = 1 - to_grayscale(I)
    if contrast != 1:
        weights = weights**(1/contrast)
    return np.ascontiguousarray(weights, dtype=np.float64)


class DensityField:
    """
    An immutable grid of stippling weights in [0, 1], stored row-major
    as values[y, x]
    """
    def __init__(self, I, contrast=1):
        values = get_density(I, contrast)
        values.flags.writeable = False
        self.values = values
        self.height, self.width = values.shape

    @property
    def shape(self):
        return self.values.shape

    def at(self, x, y):
        """
        Weight of the pixel in column x and row y
        """
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError("Pixel ({}, {}) is outside a {}x{} density field".format(
                x, y, self.width, self.height))
        return float(self.values[y, x])

    def total(self):
        return float(np.sum(self.values))


def _check_count(target_points):
    if isinstance(target_points, bool) or not isinstance(target_points, numbers.Integral):
        raise InvalidInput("Stipple count must be an integer, got {!r}".format(target_points))
    if target_points <= 0:
        raise InvalidInput("Stipple count must be positive, got {}".format(target_points))
    return int(target_points)


def rejection_sample(density, target_points, rng, max_attempts=None):
    """
    Sample pixel locations with probability proportional to their
    weight using rejection sampling

    Parameters
    ----------
    density: DensityField or ndarray(M, N)
        The weights of each pixel, in the range [0, 1]
    target_points: int
        The number of desired samples
    rng: numpy.random.Generator
        Source of randomness.  A fixed seed gives a fixed sample
    max_attempts: int
        Give up after this many draws.  Defaults to 100*target_points

    Returns
    -------
    ndarray(K, 2)
        x and y of each accepted pixel, K <= target_points.  K is
        smaller than target_points only if the attempts ran out
    """
    target_points = _check_count(target_points)
    if isinstance(density, DensityField):
        weights = density.values
    else:
        weights = np.asarray(density, dtype=float)
    height, width = weights.shape
    if max_attempts is None:
        max_attempts = ATTEMPTS_PER_STIPPLE*target_points
    X = np.zeros((target_points, 2))
    added = 0
    attempts = 0
    while added < target_points and attempts < max_attempts:
        x = rng.integers(0, width)
        y = rng.integers(0, height)
        t = rng.random()
        if t < weights[y, x]:
            X[added, 0] = x
            X[added, 1] = y
            added += 1
        attempts += 1
    return X[0:added, :]


@jit(nopython=True)
def _nearest_generator(X, width, height):
    """
    Brute force nearest generator of every pixel.  Ties go to the
    lowest index since only a strictly smaller distance replaces
    the running best
    """
    mask = np.zeros((height, width), dtype=np.int64)
    for y in range(height):
        for x in range(width):
            best = np.inf
            idx = 0
            for k in range(X.shape[0]):
                dx = x - X[k, 0]
                dy = y - X[k, 1]
                d = dx*dx + dy*dy
                if d < best:
                    best = d
                    idx = k
            mask[y, x] = idx
    return mask


def assign_voronoi(X, width, height):
    """
    Compute a discrete Voronoi diagram of the image plane

    Parameters
    ----------
    X: ndarray(N, 2)
        Generator locations, x along the first column, y along the second
    width: int
        Number of columns of the image
    height: int
        Number of rows of the image

    Returns
    -------
    ndarray(height, width)
        Index of the generator closest to each pixel
    """
    X = np.ascontiguousarray(X, dtype=np.float64)
    if X.ndim != 2 or X.shape[1] != 2:
        raise InvalidInput("Expected generators of shape (N, 2), got {}".format(X.shape))
    if X.shape[0] == 0:
        raise InvalidState("Cannot partition the image without generators")
    if width <= 0 or height <= 0:
        raise InvalidInput("Invalid image size {}x{}".format(width, height))
    return _nearest_generator(X, int(width), int(height))


@jit(nopython=True)
def _accumulate(mask, weights, N):
    nums = np.zeros((N, 2))
    denoms = np.zeros(N)
    for y in range(weights.shape[0]):
        for x in range(weights.shape[1]):
            idx = mask[y, x]
            weight = weights[y, x]
            nums[idx, 0] += weight*x
            nums[idx, 1] += weight*y
            denoms[idx] += weight
    return nums, denoms


def get_centroids(mask, X, weights):
    """
    Return the weighted centroids of each Voronoi region.  A region
    with no weight keeps its generator where it was

    Parameters
    ----------
    mask: ndarray(M, N)
        Generator index of each pixel
    X: ndarray(K, 2)
        Current generator locations
    weights: ndarray(M, N)
        The weights of each pixel

    Returns
    -------
    ndarray(K, 2)
        New generator locations
    """
    X = np.asarray(X, dtype=np.float64)
    weights = np.ascontiguousarray(weights, dtype=np.float64)
    mask = np.ascontiguousarray(mask, dtype=np.int64)
    if mask.shape != weights.shape:
        raise InvalidInput("Assignment shape {} does not match density shape {}".format(
            mask.shape, weights.shape))
    N = X.shape[0]
    if mask.size > 0 and (mask.min() < 0 or mask.max() >= N):
        raise InvalidInput("Assignment refers to generators outside [0, {})".format(N))
    nums, denoms = _accumulate(mask, weights, N)
    centroids = X.copy()
    filled = denoms > 0
    centroids[filled, :] = nums[filled, :]/denoms[filled, None]
    return centroids


def mean_displacement(X, Y):
    """
    Average distance moved by each generator between X and Y
    """
    return float(np.mean(np.sqrt(np.sum((Y - X)**2, axis=1))))


class RelaxationState(enum.Enum):
    IDLE = "idle"
    ITERATING = "iterating"
    CONVERGED = "converged"
    CAP_REACHED = "cap_reached"
    CANCELLED = "cancelled"


RelaxationResult = namedtuple("RelaxationResult", ["state", "iterations", "displacement"])


class VoronoiStippler:
    """
    A stippling session over one image.  The density field is built
    once; generators are created by initialize() and then moved by
    Lloyd's algorithm, one step() at a time or through relax().

    Not safe for concurrent use from several threads.

    Parameters
    ----------
    I: ndarray(M, N) or ndarray(M, N, 1|3|4)
        An RGB/RGBA or grayscale image.  It is copied, never modified
    rng: numpy.random.Generator
        Source of randomness for initialization.  If None, one is
        seeded with seed
    seed: int
        Seed used when no rng is given
    contrast: float
        Contrast boost applied to the density
    """
    def __init__(self, I, rng=None, seed=DEFAULT_SEED, contrast=1):
        self.density = DensityField(I, contrast)
        self.width = self.density.width
        self.height = self.density.height
        if rng is None:
            rng = np.random.default_rng(seed)
        self.rng = rng
        self._X = np.zeros((0, 2))
        self.iteration = 0
        self.displacement = None
        self.state = RelaxationState.IDLE

    def __len__(self):
        return self._X.shape[0]

    @property
    def generators(self):
        return self._X.copy()

    def initialize(self, stipple_count):
        """
        Place up to stipple_count generators by rejection sampling the
        density.  Fewer come back if the image is nearly blank

        Returns
        -------
        ndarray(K, 2)
            The initial generators
        """
        X = rejection_sample(self.density, stipple_count, self.rng)
        if X.shape[0] < stipple_count:
            logger.warning("Only placed %d of %d stipples before running out of attempts",
                           X.shape[0], stipple_count)
        logger.info("Initialized %d generators", X.shape[0])
        self._X = X
        self.iteration = 0
        self.displacement = None
        self.state = RelaxationState.IDLE
        return self.generators

    def set_generators(self, X):
        """
        Replace the generators, e.g. to resume from saved stipples
        """
        X = np.array(X, dtype=np.float64)
        if X.size == 0:
            X = np.zeros((0, 2))
        if X.ndim != 2 or X.shape[1] != 2:
            raise InvalidInput("Expected generators of shape (N, 2), got {}".format(X.shape))
        if not np.all(np.isfinite(X)):
            raise InvalidInput("Generator coordinates must be finite")
        self._X = X
        self.iteration = 0
        self.displacement = None
        self.state = RelaxationState.IDLE

    def step(self):
        """
        Run a single iteration of Lloyd's algorithm

        Returns
        -------
        float
            Mean distance the generators moved
        """
        if self._X.shape[0] == 0:
            raise InvalidState("No generators to relax; initialize() found none or was not called")
        self.state = RelaxationState.ITERATING
        mask = assign_voronoi(self._X, self.width, self.height)
        X = get_centroids(mask, self._X, self.density.values)
        displacement = mean_displacement(self._X, X)
        self._X = X
        self.iteration += 1
        self.displacement = displacement
        logger.debug("Iteration %d: mean displacement = %.4f", self.iteration, displacement)
        return displacement

    def relax(self, max_iterations=DEFAULT_MAX_ITERATIONS, threshold=DEFAULT_THRESHOLD,
              callback=None):
        """
        Step until the mean displacement drops below threshold or
        max_iterations steps have run

        Parameters
        ----------
        max_iterations: int
            Iteration cap
        threshold: float
            Convergence threshold on the mean displacement, in pixels
        callback: function(iteration, displacement)
            Called after every step.  Returning False cancels the loop

        Returns
        -------
        RelaxationResult
            Final state, number of steps taken and the last displacement
        """
        if max_iterations < 1:
            raise InvalidInput("max_iterations must be at least 1, got {}".format(max_iterations))
        if threshold < 0:
            raise InvalidInput("threshold must be non-negative, got {}".format(threshold))
        displacement = None
        for it in range(max_iterations):
            displacement = self.step()
            keep_going = True
            if callback is not None:
                keep_going = callback(self.iteration, displacement)
            if displacement < threshold:
                self.state = RelaxationState.CONVERGED
                logger.info("Converged after %d iterations (mean displacement %.4f)",
                            self.iteration, displacement)
                return RelaxationResult(self.state, it+1, displacement)
            if keep_going is False:
                self.cancel()
                return RelaxationResult(self.state, it+1, displacement)
        self.state = RelaxationState.CAP_REACHED
        logger.info("Stopped after %d iterations without converging (mean displacement %.4f)",
                    max_iterations, displacement)
        return RelaxationResult(self.state, max_iterations, displacement)

    def cancel(self):
        """
        Stop relaxing.  The current generators stay valid
        """
        self.state = RelaxationState.CANCELLED
        logger.info("Relaxation cancelled at iteration %d", self.iteration)

    def coordinates(self):
        """
        Generator locations as two index-aligned lists, the form a
        tour solver takes them in

        Returns
        -------
        xs: list of float
        ys: list of float
        """
        return self._X[:, 0].tolist(), self._X[:, 1].tolist()

    def render(self, radius=1.0, size=None):
        """
        Draw the current generators as black discs on white

        Parameters
        ----------
        radius: float
            Disc radius in pixels
        size: (int, int)
            Canvas (width, height), by default the image size
        """
        if size is None:
            size = (self.width, self.height)
        return render_stipples(self._X, size, radius)


def voronoi_stipple(I, target_points, n_iters=DEFAULT_MAX_ITERATIONS,
                    threshold=DEFAULT_THRESHOLD, rng=None, seed=DEFAULT_SEED, contrast=1):
    """
    Stipple an image from start to finish

    Parameters
    ----------
    I: ndarray(M, N) or ndarray(M, N, 1|3|4)
        An RGB/RGBA or grayscale image
    target_points: int
        Number of stipples requested
    n_iters: int
        Maximum number of Lloyd iterations
    threshold: float
        Stop once the mean displacement falls below this
    rng: numpy.random.Generator
        Source of randomness, seeded from seed if None
    seed: int
        Seed used when no rng is given
    contrast: float
        Contrast boost, apply weights^(1/contrast)

    Returns
    -------
    ndarray(K, 2)
        An array of the stipple pattern, with x coordinates along the first
        column and y coordinates along the second column
    """
    stippler = VoronoiStippler(I, rng=rng, seed=seed, contrast=contrast)
    stippler.initialize(target_points)
    if len(stippler) > 0:
        stippler.relax(n_iters, threshold)
    return stippler.generators
