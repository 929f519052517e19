"""
PyStipple - Weighted Voronoi stippling.

Turns a grayscale or color image into a set of points whose density
follows the darkness of the image, using Lloyd's relaxation of a
density-weighted Voronoi diagram.
"""

__version__ = "1.0.0"

from .errors import StippleError, InvalidInput, NotFound, DecodeFailure, InvalidState
from .stipple import (
    DensityField, VoronoiStippler, RelaxationState, RelaxationResult,
    get_density, rejection_sample, assign_voronoi, get_centroids, voronoi_stipple
)
from .render import render_stipples
from .export import to_coordinate_lists, scale_points, apply_tour, density_filter

__all__ = [
    'StippleError',
    'InvalidInput',
    'NotFound',
    'DecodeFailure',
    'InvalidState',
    'DensityField',
    'VoronoiStippler',
    'RelaxationState',
    'RelaxationResult',
    'get_density',
    'rejection_sample',
    'assign_voronoi',
    'get_centroids',
    'voronoi_stipple',
    'render_stipples',
    'to_coordinate_lists',
    'scale_points',
    'apply_tour',
    'density_filter'
]
