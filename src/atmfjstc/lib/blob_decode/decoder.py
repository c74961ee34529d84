"""
This module contains the `BlobDecoder` class, which holds a registry of frame decoders and evaluates blob specs
against `BlobBuffer`'s.
"""

import logging

from dataclasses import replace
from typing import Any, Callable, Dict, FrozenSet, Iterator, Optional, Sequence, Tuple, Union

from .BlobBuffer import BlobBuffer, BytesLike
from .frames import FrameType, FrameDecoderFunc, NOTHING, DecodedValue, normalize_frame_type
from .raw_spec import RawFrameType, RawTypeDescriptor, RawBlobSpec
from .spec import BlobSpec
from .parse_spec import parse_blob_spec, parse_type_descriptor
from .typecast import byte_to_ubyte, short_to_ushort, int_to_uint, long_to_ulong
from .errors import MalformedSpecError, UnknownFrameTypeError, BlobDecoderRegistrationError, \
    BlobInvalidArgumentError, BlobTextDecodingError


LOG = logging.getLogger(__name__)


class BlobDecoder:
    """
    A registry of frame decoders, plus the machinery for decoding whole blob specs with them.

    A new `BlobDecoder` knows all the built-in frame types (see `FrameType`). More can be added with
    `register_frame_decoder`; they are then available everywhere a built-in type can be used: in `decode_frame`, in
    blob specs, as the element type of a ``sequence``, as the prefix or data type of ``prefixed`` etc.

    Registrations only affect the instance they are made on. The module-level functions of this package work with a
    shared default instance.
    """

    text_encoding: str
    text_errors: str

    _frame_decoders: Dict[str, FrameDecoderFunc]
    _builtin_frame_decoders: Dict[str, FrameDecoderFunc]

    def __init__(self, text_encoding: str = 'utf-8', text_errors: str = 'strict'):
        """
        Args:
            text_encoding: The encoding used by the string-type frames (``string``, ``c-string`` etc.) to turn bytes
                into text.
            text_errors: The error handling scheme for text decoding, as per `bytes.decode`. With the default,
                ``'strict'``, undecodable text raises a `BlobTextDecodingError`.
        """
        self.text_encoding = text_encoding
        self.text_errors = text_errors

        self._frame_decoders = dict()
        self._install_builtin_frame_decoders()

    def _install_builtin_frame_decoders(self):
        builtins = {
            FrameType.BYTE: _make_int_decoder(BlobBuffer.get_i8),
            FrameType.UBYTE: _make_int_decoder(BlobBuffer.get_i8, byte_to_ubyte),
            FrameType.INT16: _make_int_decoder(BlobBuffer.get_i16),
            FrameType.UINT16: _make_int_decoder(BlobBuffer.get_i16, short_to_ushort),
            FrameType.INT32: _make_int_decoder(BlobBuffer.get_i32),
            FrameType.UINT32: _make_int_decoder(BlobBuffer.get_i32, int_to_uint),
            FrameType.INT64: _make_int_decoder(BlobBuffer.get_i64),
            FrameType.UINT64: _make_int_decoder(BlobBuffer.get_i64, long_to_ulong),
            FrameType.STRING: self._decode_string,
            FrameType.ARRAY: self._decode_array,
            FrameType.C_STRING: self._decode_c_string,
            FrameType.PRED_STRING: self._decode_pred_string,
            FrameType.DELIMITED_STRING: self._decode_delimited_string,
            FrameType.PREFIXED: self._decode_prefixed,
            FrameType.PREFIXED_STRING: self._decode_prefixed_string,
            FrameType.SKIP: self._decode_skip,
            FrameType.SLICE: self._decode_slice,
            FrameType.STRUCT: self._decode_struct,
            FrameType.SEQUENCE: self._decode_sequence,
        }

        self._builtin_frame_decoders = {type_.value: func for type_, func in builtins.items()}
        self._frame_decoders.update(self._builtin_frame_decoders)

    def _uses_builtin_decoder(self, type_: str, builtin: FrameType) -> bool:
        return (type_ == builtin.value) and (self._frame_decoders.get(type_) is self._builtin_frame_decoders[type_])

    def register_frame_decoder(self, type_: RawFrameType, func: FrameDecoderFunc, override: bool = False):
        """
        Adds support for a new frame type.

        Args:
            type_: The tag of the new frame type, as it will appear in blob specs.
            func: The decoding function. It will be called as ``func(buffer, type_, *params)``, where `buffer` is the
                `BlobBuffer` to read from (at its current position), `type_` is the tag as a string, and `params` are
                the parameters given in the spec, if any. It must return the decoded value, or `NOTHING` if the frame
                produces no value.
            override: Must be set to True in order to replace the decoder of an existing frame type, built-ins
                included.

        Raises:
            BlobDecoderRegistrationError: If `func` is not callable, or the type is already registered and `override`
                is not set.
        """
        type_ = normalize_frame_type(type_)

        if type_ == '':
            raise BlobDecoderRegistrationError(type_, "the type tag cannot be empty")
        if not callable(func):
            raise BlobDecoderRegistrationError(type_, f"decoder must be callable, got {type(func).__name__}")

        existing = self._frame_decoders.get(type_)
        if existing is not None:
            if not override:
                raise BlobDecoderRegistrationError(type_, "a decoder is already registered (use override=True)")

            LOG.debug("Overriding frame decoder for type '%s'", type_)
        else:
            LOG.debug("Registering frame decoder for type '%s'", type_)

        self._frame_decoders[type_] = func

    def unregister_frame_decoder(self, type_: RawFrameType):
        type_ = normalize_frame_type(type_)

        if type_ not in self._frame_decoders:
            raise UnknownFrameTypeError(type_)

        LOG.debug("Removing frame decoder for type '%s'", type_)

        del self._frame_decoders[type_]

    def has_frame_decoder(self, type_: RawFrameType) -> bool:
        return normalize_frame_type(type_) in self._frame_decoders

    def frame_types(self) -> FrozenSet[str]:
        return frozenset(self._frame_decoders.keys())

    def decode_frame(self, buffer: Union[BlobBuffer, BytesLike], type_: RawFrameType, *params: Any) -> DecodedValue:
        """
        Decodes a single frame of the given type from the buffer, at its current position.

        Examples::

            decoder.decode_frame(buffer, 'byte')  # => 42
            decoder.decode_frame(buffer, 'string', 5)  # => 'MAGIC'
            decoder.decode_frame(buffer, 'prefixed', 'string', 'uint16')  # => 'Awesome!'

        If `buffer` is given as raw bytes, it is wrapped in a new big-endian `BlobBuffer` first.

        Raises:
            UnknownFrameTypeError: If no decoder is registered for `type_`.
            BlobOutOfBoundsError: If the frame extends past the end of the buffer.
            BlobInvalidArgumentError: If the parameters are not suitable for the frame type.
        """
        buffer = _as_buffer(buffer)
        type_ = normalize_frame_type(type_)

        func = self._frame_decoders.get(type_)
        if func is None:
            raise UnknownFrameTypeError(type_)

        return func(buffer, type_, *params)

    def decode_descriptor(self, buffer: Union[BlobBuffer, BytesLike], descriptor: RawTypeDescriptor) -> DecodedValue:
        """
        Decodes a single frame described by a type descriptor as it would appear in a blob spec, i.e. either a bare
        frame type (``'uint32'``), or a list/tuple of a frame type and its parameters (``('string', 5)``).
        """
        try:
            parsed = parse_type_descriptor(descriptor)
            params = self._prepare_params(parsed.type, parsed.params)
        except MalformedSpecError:
            raise
        except Exception as e:
            raise MalformedSpecError(f"Invalid type descriptor: {descriptor!r}") from e

        return self.decode_frame(buffer, parsed.type, *params)

    def parse_blob_spec(self, spec: RawBlobSpec) -> BlobSpec:
        """
        Checks a blob spec and converts it into a `BlobSpec`. The result can be passed to `decode_blob` in place of the
        raw spec, so that a spec used many times is only checked once.

        Nested specs are checked too, wherever the frame type is handled by the built-in ``struct`` decoder (directly
        or as the element type of a built-in ``sequence``). The parameters of overridden types are kept as given.

        A warning is logged if a field name occurs more than once.
        """
        if isinstance(spec, BlobSpec):
            return spec

        blob_spec = parse_blob_spec(spec)
        fields = []

        for field in blob_spec.fields:
            try:
                params = self._prepare_params(field.descriptor.type, field.descriptor.params)
            except MalformedSpecError as e:
                raise MalformedSpecError(f"Invalid nested spec for field {field.name!r}") from e

            fields.append(replace(field, descriptor=replace(field.descriptor, params=params)))

        if len(blob_spec.duplicate_names) > 0:
            LOG.warning(
                "Field name(s) %s occur more than once in blob spec, later values will overwrite earlier ones",
                ', '.join(repr(name) for name in blob_spec.duplicate_names)
            )

        return replace(blob_spec, fields=tuple(fields))

    def _prepare_params(self, type_: str, params: Tuple[Any, ...]) -> Tuple[Any, ...]:
        if self._uses_builtin_decoder(type_, FrameType.STRUCT) and (len(params) == 1):
            return (self.parse_blob_spec(params[0]),)

        if self._uses_builtin_decoder(type_, FrameType.SEQUENCE) and (len(params) > 0) and \
                isinstance(params[0], str):
            element_type = normalize_frame_type(params[0])
            return (element_type,) + self._prepare_params(element_type, tuple(params[1:]))

        return params

    def decode_blob(self, buffer: Union[BlobBuffer, BytesLike], spec: RawBlobSpec) -> Dict[str, Any]:
        """
        Decodes multiple frames from a buffer, according to a specification.

        The specification is a flat list of field names alternating with type descriptors. Fields are decoded in
        order, starting at the buffer's current position. A type descriptor is either a bare frame type, or, if the
        type needs parameters, a list/tuple containing the type followed by its parameters.

        Example::

            decoder.decode_blob(buffer, [
                'magic', ('string', 4),
                'header_length', 'uint32',
                SKIP, 2,
                'flags', 'ubyte',
            ])

        Using `SKIP` in place of a field name skips the number of bytes that follows it. Fields whose decoder returns
        `NOTHING` (e.g. a ``('skip', n)`` field) are left out of the result. If the same field name occurs more than
        once, the last value wins.

        The spec can also be given as a `BlobSpec` obtained from `parse_blob_spec`.

        Returns:
            A new dict mapping field names to decoded values.

        Raises:
            MalformedSpecError: If the spec is not well-formed. This is checked before any data is read.
            BlobDecodeError: Any other decoding error is propagated as-is; the fields decoded so far are discarded.
        """
        buffer = _as_buffer(buffer)
        blob_spec = self.parse_blob_spec(spec)

        result = dict()

        for field in blob_spec.fields:
            value = self.decode_frame(buffer, field.descriptor.type, *field.descriptor.params)

            if (field.name is not None) and (value is not NOTHING):
                result[field.name] = value

        return result

    def decode_blob_array(
        self, buffer: Union[BlobBuffer, BytesLike], type_: RawFrameType, *params: Any
    ) -> Iterator[DecodedValue]:
        """
        Decodes all the remaining frames in a buffer, all of the same type. Use this when you have a buffer that
        contains an unspecified number of frames of the same type.

        This is the same as decoding a ``sequence`` frame. The result is a lazy iterator; see `_decode_sequence` for
        the details.
        """
        return self.decode_frame(buffer, FrameType.SEQUENCE, type_, *params)

    def _decode_text(self, buffer: BlobBuffer, data: bytes, position: int) -> str:
        try:
            return data.decode(self.text_encoding, self.text_errors)
        except UnicodeDecodeError as e:
            buffer.seek(position)
            raise BlobTextDecodingError(position, self.text_encoding) from e

    def _decode_string(self, buffer: BlobBuffer, type_: str, *params: Any) -> str:
        length, = _expect_params(type_, params, 1)
        position = buffer.tell()

        return self._decode_text(buffer, buffer.read_bytes(_expect_length(type_, length), 'string'), position)

    def _decode_array(self, buffer: BlobBuffer, type_: str, *params: Any) -> bytes:
        length, = _expect_params(type_, params, 1)

        return buffer.read_bytes(_expect_length(type_, length), 'byte array')

    def _decode_c_string(self, buffer: BlobBuffer, type_: str, *params: Any) -> str:
        _expect_params(type_, params, 0)

        return self.decode_frame(buffer, FrameType.PRED_STRING, _is_zero_byte)

    def _decode_pred_string(self, buffer: BlobBuffer, type_: str, *params: Any) -> str:
        predicate, = _expect_params(type_, params, 1)

        if not callable(predicate):
            raise BlobInvalidArgumentError(
                f"Frame type '{type_}' expects a predicate, got {type(predicate).__name__}"
            )

        position = buffer.tell()

        return self._decode_text(buffer, buffer.read_bytes_until(predicate, 'terminated string'), position)

    def _decode_delimited_string(self, buffer: BlobBuffer, type_: str, *params: Any) -> str:
        delimiters, = _expect_params(type_, params, 1)
        delimiter_bytes = _parse_delimiters(type_, delimiters)

        return self.decode_frame(buffer, FrameType.PRED_STRING, lambda byte: byte in delimiter_bytes)

    def _decode_prefixed(self, buffer: BlobBuffer, type_: str, *params: Any) -> DecodedValue:
        """
        Decodes a length-prefixed frame. The parameters are the data type, the prefix type, and any parameters the
        prefix type needs. The length is read with the prefix type and then passed as the sole parameter of the data
        type.
        """
        if len(params) < 2:
            raise BlobInvalidArgumentError(
                f"Frame type '{type_}' takes a data type, a prefix type and optional prefix parameters, got "
                f"{len(params)} parameter(s)"
            )

        data_type, prefix_type, *prefix_params = params

        length = self.decode_frame(buffer, prefix_type, *prefix_params)

        return self.decode_frame(buffer, data_type, _expect_length(type_, length))

    def _decode_prefixed_string(self, buffer: BlobBuffer, type_: str, *params: Any) -> str:
        if len(params) < 1:
            raise BlobInvalidArgumentError(f"Frame type '{type_}' needs at least the prefix type")

        return self.decode_frame(buffer, FrameType.PREFIXED, FrameType.STRING, *params)

    def _decode_skip(self, buffer: BlobBuffer, type_: str, *params: Any):
        n_bytes, = _expect_params(type_, params, 1)

        buffer.skip(_expect_length(type_, n_bytes))

        return NOTHING

    def _decode_slice(self, buffer: BlobBuffer, type_: str, *params: Any) -> BlobBuffer:
        length, = _expect_params(type_, params, 1)

        return buffer.slice(_expect_length(type_, length))

    def _decode_struct(self, buffer: BlobBuffer, type_: str, *params: Any) -> Dict[str, Any]:
        struct_spec, = _expect_params(type_, params, 1)

        return self.decode_blob(buffer, struct_spec)

    def _decode_sequence(self, buffer: BlobBuffer, type_: str, *params: Any) -> Iterator[DecodedValue]:
        """
        Decodes a lazy sequence of frames of the same type, lasting until the end of the buffer. The parameters are the
        element type and any parameters it needs.

        Nothing is read until the sequence is iterated, and each element is decoded only when it is requested. All
        state lives in the buffer's cursor, so:

        - If only part of the sequence is consumed, further reads from the buffer resume at the first unconsumed
          element
        - The sequence can only be iterated once. To go over the frames again, seek the buffer back and decode a new
          sequence.

        Elements that decode to `NOTHING` are not yielded.
        """
        if len(params) < 1:
            raise BlobInvalidArgumentError(f"Frame type '{type_}' needs at least the element type")

        element_type, *element_params = params
        element_type = normalize_frame_type(element_type)

        if not self.has_frame_decoder(element_type):
            raise UnknownFrameTypeError(element_type)

        return self._iter_sequence(buffer, element_type, self._prepare_params(element_type, tuple(element_params)))

    def _iter_sequence(self, buffer: BlobBuffer, element_type: str, element_params: Tuple[Any, ...]) -> Iterator[Any]:
        while buffer.remaining() > 0:
            start = buffer.tell()

            value = self.decode_frame(buffer, element_type, *element_params)

            if buffer.tell() == start:
                raise BlobInvalidArgumentError(
                    f"Sequence element of type '{element_type}' at position {start} consumed no data"
                )

            if value is not NOTHING:
                yield value


def _make_int_decoder(
    getter: Callable[[BlobBuffer], int], typecast: Optional[Callable[[int], int]] = None
) -> FrameDecoderFunc:
    def _decode(buffer: BlobBuffer, type_: str, *params: Any) -> int:
        _expect_params(type_, params, 0)

        value = getter(buffer, type_)

        return value if typecast is None else typecast(value)

    return _decode


def _as_buffer(buffer: Union[BlobBuffer, BytesLike]) -> BlobBuffer:
    if isinstance(buffer, BlobBuffer):
        return buffer
    if isinstance(buffer, (bytes, bytearray, memoryview)):
        return BlobBuffer(buffer)

    raise TypeError(f"Expected a BlobBuffer or bytes-like object, got {type(buffer).__name__}")


def _expect_params(type_: str, params: Sequence[Any], count: int) -> Sequence[Any]:
    if len(params) != count:
        raise BlobInvalidArgumentError(f"Frame type '{type_}' takes {count} parameter(s), got {len(params)}")

    return params


def _expect_length(type_: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise BlobInvalidArgumentError(f"Frame type '{type_}' expects an int length, got {type(value).__name__}")
    if value < 0:
        raise BlobInvalidArgumentError(f"Frame type '{type_}' expects a non-negative length (is: {value})")

    return value


def _is_zero_byte(byte: int) -> bool:
    return byte == 0


def _parse_delimiters(type_: str, delimiters: Any) -> FrozenSet[int]:
    if isinstance(delimiters, (bytes, bytearray)):
        return frozenset(delimiters)
    if isinstance(delimiters, int) or not hasattr(delimiters, '__iter__'):
        raise BlobInvalidArgumentError(
            f"Frame type '{type_}' expects a collection of delimiters, got {type(delimiters).__name__}"
        )

    result = set()

    for delimiter in delimiters:
        if isinstance(delimiter, str) and (len(delimiter) == 1) and (ord(delimiter) < 256):
            result.add(ord(delimiter))
        elif isinstance(delimiter, int) and not isinstance(delimiter, bool) and (0 <= delimiter < 256):
            result.add(delimiter)
        else:
            raise BlobInvalidArgumentError(
                f"Frame type '{type_}' expects single-byte delimiters (1-char strings or ints 0..255), got "
                f"{delimiter!r}"
            )

    return frozenset(result)
