"""Exceptions raised by the scoring core."""


class SourceVerifyError(Exception):
    """Base SourceVerify exception."""
    pass


class DecodeError(SourceVerifyError):
    """Image bytes could not be decoded into a raster."""
    pass


class InvalidSignalOutput(SourceVerifyError, ValueError):
    """A signal reported a score or weight outside its contract."""
    pass
