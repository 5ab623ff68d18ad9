# nnfield/errors.py


class NNFError(Exception):
    """Base class for every error raised by nnfield."""


class InvalidConfiguration(NNFError, ValueError):
    """Bad matcher parameters, or images that cannot hold a single patch."""


class DecodeFailure(NNFError, RuntimeError):
    """An input image could not be read or decoded."""


class EncodeFailure(NNFError, RuntimeError):
    """An output image could not be encoded or written."""
