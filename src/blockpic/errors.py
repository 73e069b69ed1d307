class BlockpicError(Exception):
    """Base class for errors raised by blockpic."""


class InvalidChunkDimension(BlockpicError, ValueError):
    def __init__(self, chunk_width: int, chunk_height: int):
        super().__init__(f"Chunk dimensions must be positive, got {chunk_width}x{chunk_height}")
        self.chunk_width = chunk_width
        self.chunk_height = chunk_height


class ImageSourceError(BlockpicError):
    """The image could not be acquired or decoded."""


class UnsupportedSchemeError(ImageSourceError):
    def __init__(self, scheme: str, uri: str):
        super().__init__(f"Unsupported scheme {scheme!r} in {uri}")
        self.scheme = scheme
        self.uri = uri


class SourceUnavailableError(ImageSourceError):
    pass


class UnsupportedFormatError(ImageSourceError, ValueError):
    pass
