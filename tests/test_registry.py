import unittest

from atmfjstc.lib.blob_decode import BlobBuffer, BlobDecoder, FrameType, DEFAULT_DECODER, decode_frame
from atmfjstc.lib.blob_decode.errors import BlobDecoderRegistrationError, UnknownFrameTypeError, MalformedSpecError


def decode_uint24(buffer, type_):
    return int.from_bytes(buffer.read_bytes(3), 'big' if buffer.big_endian else 'little')


def decode_fixed_point(buffer, type_, fraction_bits):
    return buffer.get_i16() / (1 << fraction_bits)


class RegisterFrameDecoderTest(unittest.TestCase):
    def setUp(self):
        self.decoder = BlobDecoder()

    def test_builtins_present(self):
        self.assertEqual(self.decoder.frame_types(), frozenset(member.value for member in FrameType))

    def test_custom_type(self):
        self.decoder.register_frame_decoder('uint24', decode_uint24)

        buffer = BlobBuffer(bytes([1, 0, 0, 0xff]))

        self.assertEqual(self.decoder.decode_frame(buffer, 'uint24'), 65536)
        self.assertEqual(self.decoder.decode_frame(buffer, 'byte'), -1)

    def test_custom_type_with_params_in_spec(self):
        self.decoder.register_frame_decoder('fixed', decode_fixed_point)

        result = self.decoder.decode_blob(BlobBuffer(bytes([0, 0x18, 1])), ['value', ('fixed', 4), 'flag', 'ubyte'])

        self.assertEqual(result, {'value': 1.5, 'flag': 1})

    def test_custom_type_in_composites(self):
        self.decoder.register_frame_decoder('uint24', decode_uint24)

        buffer = BlobBuffer(bytes([0, 0, 2]) + b'hi' + bytes([0, 0, 1, 0, 0, 2]))

        self.assertEqual(self.decoder.decode_frame(buffer, 'prefixed', 'string', 'uint24'), "hi")
        self.assertEqual(list(self.decoder.decode_blob_array(buffer, 'uint24')), [1, 2])

    def test_registrations_are_per_instance(self):
        self.decoder.register_frame_decoder('uint24', decode_uint24)

        self.assertFalse(DEFAULT_DECODER.has_frame_decoder('uint24'))

        with self.assertRaises(UnknownFrameTypeError):
            decode_frame(BlobBuffer(bytes(3)), 'uint24')

    def test_builtins_unaffected(self):
        self.decoder.register_frame_decoder('uint24', decode_uint24)

        self.assertEqual(self.decoder.decode_frame(BlobBuffer(b'\xff\xff'), 'uint16'), 65535)

    def test_conflict(self):
        with self.assertRaises(BlobDecoderRegistrationError):
            self.decoder.register_frame_decoder('uint16', decode_uint24)

        self.decoder.register_frame_decoder('uint24', decode_uint24)

        with self.assertRaises(BlobDecoderRegistrationError):
            self.decoder.register_frame_decoder('uint24', decode_uint24)

    def test_override(self):
        with self.assertLogs('atmfjstc.lib.blob_decode.decoder', level='DEBUG'):
            self.decoder.register_frame_decoder(FrameType.UBYTE, lambda buffer, type_: 'overridden', override=True)

        self.assertEqual(self.decoder.decode_blob(BlobBuffer(b'\xff'), ['x', 'ubyte']), {'x': 'overridden'})

    def test_override_reaches_composites(self):
        self.decoder.register_frame_decoder(
            'pred-string', lambda buffer, type_, predicate: buffer.read_bytes_until(predicate), override=True
        )

        self.assertEqual(self.decoder.decode_frame(BlobBuffer(b'abc\0'), 'c-string'), b'abc')

    def test_struct_override_in_spec(self):
        self.decoder.register_frame_decoder('struct', lambda buffer, type_, layout: buffer.get_u8(), override=True)

        self.assertEqual(
            self.decoder.decode_blob(BlobBuffer(bytes([7, 0xff])), ['color', ('struct', 'rgb'), 'flag', 'byte']),
            {'color': 7, 'flag': -1}
        )
        self.assertEqual(
            list(self.decoder.decode_blob_array(BlobBuffer(bytes([1, 2])), 'struct', 'rgb')),
            [1, 2]
        )

    def test_builtin_struct_still_checked_in_advance(self):
        buffer = BlobBuffer(bytes(4))

        with self.assertRaises(MalformedSpecError):
            self.decoder.decode_blob(buffer, ['a', 'byte', 'b', ('struct', 'rgb')])

        self.assertEqual(buffer.tell(), 0)

    def test_not_callable(self):
        with self.assertRaises(BlobDecoderRegistrationError):
            self.decoder.register_frame_decoder('uint24', 24)

    def test_unregister(self):
        self.decoder.register_frame_decoder('uint24', decode_uint24)
        self.decoder.unregister_frame_decoder('uint24')

        self.assertFalse(self.decoder.has_frame_decoder('uint24'))

        with self.assertRaises(UnknownFrameTypeError):
            self.decoder.unregister_frame_decoder('uint24')


if __name__ == '__main__':
    unittest.main()
