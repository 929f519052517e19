"""
Reading images and writing results.  Nothing in the stippling
core touches the file system; these are the adapters around it
"""
import logging
import os

import matplotlib.pyplot as plt
import numpy as np

from .errors import DecodeFailure, NotFound

logger = logging.getLogger(__name__)


def read_image(path):
    """
    A wrapper around matplotlib's image loader that deals with
    images that are grayscale or which have an alpha channel

    Parameters
    ----------
    path: string
        Path to file

    Returns
    -------
    ndarray(M, N, 3)
        An RGB color image in the range [0, 1]
    """
    if not os.path.isfile(path):
        raise NotFound("Image not found: {}".format(path))
    try:
        img = plt.imread(path)
    except (OSError, ValueError, SyntaxError) as e:
        raise DecodeFailure("Could not decode {}: {}".format(path, e)) from e
    if np.issubdtype(img.dtype, np.integer):
        img = np.array(img, dtype=float)/255
    if len(img.shape) == 3:
        if img.shape[2] > 3:
            # Cut off alpha channel
            img = img[:, :, 0:3]
    if img.size == img.shape[0]*img.shape[1]:
        # Grayscale, convert to rgb
        img = img.reshape(img.shape[0], img.shape[1])
        img = np.concatenate(
            (img[:, :, None], img[:, :, None], img[:, :, None]), axis=2)
    logger.debug("Read %dx%d image from %s", img.shape[1], img.shape[0], path)
    return img


def save_raster(raster, path):
    """
    Save a grayscale uint8 raster as an image
    """
    plt.imsave(path, raster, cmap="gray", vmin=0, vmax=255)
    logger.info("Saved render to %s", path)


def write_points_csv(X, path):
    """
    Write one "x,y" line per stipple, in index order
    """
    X = np.asarray(X, dtype=float).reshape(-1, 2)
    np.savetxt(path, X, fmt="%.17g", delimiter=",")
    logger.info("Saved %d stipples to %s", X.shape[0], path)


def read_points_csv(path):
    """
    Read stipples written by write_points_csv

    Returns
    -------
    ndarray(N, 2)
    """
    if not os.path.isfile(path):
        raise NotFound("Point file not found: {}".format(path))
    with open(path) as f:
        text = f.read()
    if not text.strip():
        return np.zeros((0, 2))
    try:
        X = np.loadtxt(text.splitlines(), delimiter=",", ndmin=2)
    except ValueError as e:
        raise DecodeFailure("Malformed point file {}: {}".format(path, e)) from e
    if X.shape[1] != 2:
        raise DecodeFailure("Expected 2 columns in {}, got {}".format(path, X.shape[1]))
    return X
