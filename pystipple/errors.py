"""
Exceptions raised by pystipple
"""


class StippleError(Exception):
    """Base class for every error raised by this package"""


class InvalidInput(StippleError, ValueError):
    """Bad image dimensions, stipple counts or other parameters"""


class NotFound(StippleError, FileNotFoundError):
    """An image or point file does not exist"""


class DecodeFailure(StippleError, ValueError):
    """A file exists but could not be decoded"""


class InvalidState(StippleError, RuntimeError):
    """The session was used out of order, e.g. relaxing with no generators"""
