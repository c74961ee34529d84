"""
Declarative decoding of binary blobs.

This package lets you pull typed values out of a byte buffer by writing a simple C struct-like specification::

    from atmfjstc.lib.blob_decode import BlobBuffer, decode_blob, SKIP

    header = decode_blob(BlobBuffer(data), [
        'magic', ('string', 4),
        'header_length', 'uint32',
        SKIP, 2,
        'name', ('prefixed', 'string', 'ubyte'),
        'body', ('slice', 16),
    ])

Decoding is partial and incremental: only the fields in the spec are read, starting at the buffer's current position,
and the buffer's cursor is left just past the last of them. One can then decode more fields, hand a slice of the buffer
to another decode call, and so on. See `BlobDecoder.decode_blob` for the spec format and `FrameType` for the built-in
frame types.

New frame types can be added with `register_frame_decoder`. The module-level functions here all share a single default
`BlobDecoder`; create a separate instance if registrations should not be visible process-wide.
"""

from typing import Any, Dict, Iterator, Union

from .BlobBuffer import BlobBuffer, BytesLike, DEFAULT_BIG_ENDIAN
from .frames import FrameType, FrameDecoderFunc, NOTHING, DecodedValue
from .spec import SKIP, BlobSpec
from .raw_spec import RawFrameType, RawTypeDescriptor, RawBlobSpec
from .decoder import BlobDecoder
from .errors import BlobDecodeError, MalformedSpecError, UnknownFrameTypeError, BlobDecoderRegistrationError, \
    BlobInvalidArgumentError, BlobTextDecodingError, BlobOutOfBoundsError, BlobUnterminatedDataError


__version__ = '1.0.0'


DEFAULT_DECODER = BlobDecoder()


def decode_frame(buffer: Union[BlobBuffer, BytesLike], type_: RawFrameType, *params: Any) -> DecodedValue:
    """
    Decodes a single frame using the default decoder. See `BlobDecoder.decode_frame`.
    """
    return DEFAULT_DECODER.decode_frame(buffer, type_, *params)


def decode_blob(buffer: Union[BlobBuffer, BytesLike], spec: RawBlobSpec) -> Dict[str, Any]:
    """
    Decodes multiple frames according to a spec, using the default decoder. See `BlobDecoder.decode_blob`.
    """
    return DEFAULT_DECODER.decode_blob(buffer, spec)


def decode_blob_array(buffer: Union[BlobBuffer, BytesLike], type_: RawFrameType, *params: Any) -> Iterator[Any]:
    return DEFAULT_DECODER.decode_blob_array(buffer, type_, *params)


def register_frame_decoder(type_: RawFrameType, func: FrameDecoderFunc, override: bool = False):
    """
    Registers a new frame type with the default decoder. See `BlobDecoder.register_frame_decoder`.
    """
    DEFAULT_DECODER.register_frame_decoder(type_, func, override=override)
