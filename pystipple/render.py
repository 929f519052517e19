import numpy as np

from .errors import InvalidInput

WHITE = 255
BLACK = 0


def disc_offsets(radius):
    """
    Mask of the pixels within radius of the centre of a
    (2*ceil(radius)+1)-wide square

    Returns
    -------
    r: int
        Half-width of the square
    disc: ndarray(2r+1, 2r+1) of bool
    """
    r = int(np.ceil(radius))
    dy, dx = np.mgrid[-r:r+1, -r:r+1]
    return r, dx**2 + dy**2 <= radius**2


def render_stipples(X, size, radius=1.0):
    """
    Rasterize stipples as filled black discs on a white canvas, in
    order, clipping each disc to the canvas

    Parameters
    ----------
    X: ndarray(N, 2)
        Stipple locations, x along the first column, y along the second
    size: (int, int)
        Width and height of the canvas
    radius: float
        Disc radius in pixels

    Returns
    -------
    ndarray(height, width) of uint8
        The rendered image
    """
    width, height = size
    if width <= 0 or height <= 0:
        raise InvalidInput("Invalid canvas size {}x{}".format(width, height))
    if radius < 0:
        raise InvalidInput("Disc radius must be non-negative, got {}".format(radius))
    width, height = int(width), int(height)
    canvas = np.full((height, width), WHITE, dtype=np.uint8)
    r, disc = disc_offsets(radius)
    for x, y in np.asarray(X, dtype=float).reshape(-1, 2):
        if not (np.isfinite(x) and np.isfinite(y)):
            continue
        cx, cy = int(x), int(y)
        x0, x1 = max(cx - r, 0), min(cx + r + 1, width)
        y0, y1 = max(cy - r, 0), min(cy + r + 1, height)
        if x0 >= x1 or y0 >= y1:
            continue
        inside = disc[y0-(cy-r):y1-(cy-r), x0-(cx-r):x1-(cx-r)]
        canvas[y0:y1, x0:x1][inside] = BLACK
    return canvas
