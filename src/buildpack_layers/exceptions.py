"""Custom exceptions for layer building and hashing."""


class LayerError(Exception):
    """Base exception for all layer errors."""

    pass


class BuildError(LayerError):
    """Raised when a layer archive cannot be written.

    Covers failures to create the destination file, open the module blob,
    decode the blob's entries, or write the rewritten entries. The message
    names the module and the entry or file involved.
    """

    pass


class HashError(LayerError):
    """Raised when the hashes of a finished layer cannot be computed.

    This error is independent of build failures since hashing operates on
    an already written file.
    """

    pass
