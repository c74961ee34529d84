from typing import Optional, Any


class BlobDecodeError(Exception):
    """
    Base class for all exceptions raised while setting up or running a blob decode.
    """


class MalformedSpecError(BlobDecodeError):
    """
    Raised when a blob spec is not structurally well-formed (odd length, bad field names, bad type descriptors etc).
    The spec is checked in full before any data is read, so no bytes are consumed when this is raised.
    """


class UnknownFrameTypeError(BlobDecodeError):
    type: Any

    def __init__(self, type_: Any):
        super().__init__(f"No frame decoder registered for type {type_!r}")

        self.type = type_


class BlobDecoderRegistrationError(BlobDecodeError):
    type: str

    def __init__(self, type_: str, message: str):
        super().__init__(f"Cannot register frame decoder for type '{type_}': {message}")

        self.type = type_


class BlobInvalidArgumentError(BlobDecodeError, ValueError):
    """
    Raised when a frame decoder or buffer operation receives parameters it cannot use (e.g. a negative length).
    """


class BlobTextDecodingError(BlobDecodeError):
    position: int
    encoding: str

    def __init__(self, position: int, encoding: str):
        super().__init__(f"Text read at position {position} is not valid {encoding}")

        self.position = position
        self.encoding = encoding


class BlobOutOfBoundsError(BlobDecodeError):
    """
    Raised when a read, skip or slice would consume more bytes than remain in the readable region of a buffer.
    """

    position: int
    expected_length: int
    actual_length: int
    meaning: Optional[str]

    def __init__(self, position: int, expected_length: int, actual_length: int, meaning: Optional[str]):
        self.position = position
        self.expected_length = expected_length
        self.actual_length = actual_length
        self.meaning = meaning

        super().__init__(
            f"At position {position}, expected {expected_length} "
            f"bytes{f' for {meaning}' if meaning is not None else ''}"
            f", but only {actual_length} remain"
        )


class BlobUnterminatedDataError(BlobOutOfBoundsError):
    """
    Raised when the end of the buffer is reached while looking for the terminator of a null-terminated, delimited or
    predicate-terminated string. The missing terminator counts as the one byte that could not be read.
    """

    def __init__(self, position: int, actual_length: int, meaning: Optional[str]):
        self.position = position
        self.expected_length = actual_length + 1
        self.actual_length = actual_length
        self.meaning = meaning

        BlobDecodeError.__init__(
            self,
            f"At position {position}, {meaning or 'terminated data'} starts but end of the data occurs without the "
            f"terminator being found"
        )
