from enum import Enum
from typing import Any, Callable, Union, Dict, Iterator

from .BlobBuffer import BlobBuffer


class FrameType(str, Enum):
    """
    The tags of the frame types every `BlobDecoder` comes with. Members compare equal to their string values, so specs
    can use either ``FrameType.UINT32`` or just ``'uint32'``.
    """

    BYTE = 'byte'
    UBYTE = 'ubyte'
    INT16 = 'int16'
    UINT16 = 'uint16'
    INT32 = 'int32'
    UINT32 = 'uint32'
    INT64 = 'int64'
    UINT64 = 'uint64'
    STRING = 'string'
    ARRAY = 'array'
    C_STRING = 'c-string'
    PRED_STRING = 'pred-string'
    DELIMITED_STRING = 'delimited-string'
    PREFIXED = 'prefixed'
    PREFIXED_STRING = 'prefixed-string'
    SKIP = 'skip'
    SLICE = 'slice'
    STRUCT = 'struct'
    SEQUENCE = 'sequence'

    def __str__(self) -> str:
        return self.value


class _Nothing:
    """
    The type of `NOTHING`, the value returned by frame decoders that produce no output (e.g. ``skip``).

    Fields that decode to `NOTHING` are left out of the result of `decode_blob`, whereas fields that decode to `None`,
    ``0``, ``''`` etc. are kept.
    """

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return 'NOTHING'

    def __reduce__(self):
        return 'NOTHING'


NOTHING = _Nothing()


DecodedValue = Union[int, str, bytes, BlobBuffer, Dict[str, Any], Iterator[Any], _Nothing]

FrameDecoderFunc = Callable[..., Any]
"""
Signature of a frame decoder: ``func(buffer, type_, *params)``, returning the decoded value or `NOTHING`.
"""


def normalize_frame_type(type_: Union[str, FrameType]) -> str:
    if isinstance(type_, FrameType):
        return type_.value
    if not isinstance(type_, str):
        raise TypeError(f"Frame type must be a string or FrameType, got {type(type_).__name__}")

    return type_
