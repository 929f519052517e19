"""
Hand-off of stipples to a tour solver and back
"""
import numpy as np
from scipy.spatial import KDTree

from .errors import InvalidInput


def _as_points(X):
    X = np.asarray(X, dtype=float)
    if X.ndim != 2 or X.shape[1] != 2:
        raise InvalidInput("Expected points of shape (N, 2), got {}".format(X.shape))
    return X


def to_coordinate_lists(X):
    """
    Split stipples into index-aligned x and y lists.  The index of a
    stipple is its id for the tour solver
    """
    X = _as_points(X)
    return X[:, 0].tolist(), X[:, 1].tolist()


def scale_points(X, factor):
    """
    Scale stipple coordinates for a higher resolution drawing
    """
    if not factor > 0:
        raise InvalidInput("Scale factor must be positive, got {}".format(factor))
    return _as_points(X)*factor


def apply_tour(X, tour):
    """
    Put stipples in the visiting order returned by a tour solver

    Parameters
    ----------
    X: ndarray(N, 2)
        Stipple pattern
    tour: list of int
        A permutation of range(N)

    Returns
    -------
    ndarray(N, 2)
        The stipples in tour order
    """
    X = _as_points(X)
    tour = np.asarray(tour)
    N = X.shape[0]
    if N == 0 and tour.size == 0:
        return X.copy()
    if tour.ndim != 1 or tour.size != N or not np.issubdtype(tour.dtype, np.integer):
        raise InvalidInput("Tour must list each of the {} stipples once".format(N))
    if not np.array_equal(np.sort(tour), np.arange(N)):
        raise InvalidInput("Tour is not a permutation of range({})".format(N))
    return X[tour, :]


def density_filter(X, fac, k=1):
    """
    Filter out the most isolated points

    Parameters
    ----------
    X: ndarray(N, 2)
        Point cloud
    fac: float
        Fraction (between 0 and 1) of points to keep, by density
    k: int
        How many neighbors to consider

    Returns
    -------
    ndarray(M, 2)
        The kept points, in their original order
    """
    X = _as_points(X)
    if not 0 < fac <= 1:
        raise InvalidInput("Fraction to keep must be in (0, 1], got {}".format(fac))
    if k < 1 or X.shape[0] <= k:
        raise InvalidInput("Need more than k={} points, got {}".format(k, X.shape[0]))
    tree = KDTree(X)
    dd, _ = tree.query(X, k=k+1)
    dd = np.mean(dd[:, 1::], axis=1)
    q = np.quantile(dd, fac)
    return X[dd <= q, :]
