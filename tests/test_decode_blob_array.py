import unittest

from itertools import islice

from atmfjstc.lib.blob_decode import BlobBuffer, decode_blob_array, decode_frame, decode_blob
from atmfjstc.lib.blob_decode.errors import BlobInvalidArgumentError, BlobOutOfBoundsError, UnknownFrameTypeError, \
    MalformedSpecError


def minus_one_buffer(n):
    return BlobBuffer(b'\xff' * n)


def wrap_string_in_prefixed_buffer(text):
    return BlobBuffer(len(text).to_bytes(4, 'big') + text.encode('ascii'))


class DecodeBlobArrayTest(unittest.TestCase):
    def test_homogenous_frames(self):
        buffer = minus_one_buffer(10)

        self.assertEqual(list(decode_blob_array(buffer, 'byte')), [-1] * 10)
        self.assertEqual(buffer.remaining(), 0)

    def test_lazily(self):
        buffer = minus_one_buffer(10)

        self.assertEqual(list(islice(decode_blob_array(buffer, 'byte'), 2)), [-1, -1])
        self.assertEqual(buffer.tell(), 2)
        self.assertEqual(list(decode_blob_array(buffer, 'byte')), [-1] * 8)

    def test_nothing_read_until_iterated(self):
        buffer = minus_one_buffer(4)

        sequence = decode_blob_array(buffer, 'int16')

        self.assertEqual(buffer.tell(), 0)
        self.assertEqual(next(sequence), -1)
        self.assertEqual(buffer.tell(), 2)

    def test_direct_read_after_partial_consumption(self):
        buffer = BlobBuffer(bytes(range(10)))

        sequence = decode_blob_array(buffer, 'byte')
        self.assertEqual([next(sequence), next(sequence), next(sequence)], [0, 1, 2])

        self.assertEqual(decode_frame(buffer, 'byte'), 3)
        self.assertEqual(next(sequence), 4)

    def test_with_options(self):
        self.assertEqual(
            list(decode_blob_array(wrap_string_in_prefixed_buffer("MAGIC"), 'prefixed', 'string', 'uint32')),
            ["MAGIC"]
        )

    def test_with_options_and_structs(self):
        self.assertEqual(
            list(decode_blob_array(
                wrap_string_in_prefixed_buffer("MAGIC"), 'struct', ['magic', ['prefixed', 'string', 'uint32']]
            )),
            [{'magic': "MAGIC"}]
        )

    def test_empty_buffer(self):
        self.assertEqual(list(decode_blob_array(BlobBuffer(b''), 'int32')), [])

    def test_truncated_last_element(self):
        sequence = decode_blob_array(minus_one_buffer(6), 'int32')

        self.assertEqual(next(sequence), -1)

        with self.assertRaises(BlobOutOfBoundsError):
            next(sequence)

    def test_skips_are_not_yielded(self):
        buffer = BlobBuffer(bytes([1, 0, 2, 0]))

        self.assertEqual(list(decode_blob_array(buffer, 'struct', ['x', 'byte', 'pad', ('skip', 1)])), [
            {'x': 1}, {'x': 2}
        ])
        self.assertEqual(list(decode_blob_array(BlobBuffer(bytes(4)), 'skip', 2)), [])

    def test_struct_duplicate_names_warned_once(self):
        with self.assertLogs('atmfjstc.lib.blob_decode.decoder', level='WARNING') as cm:
            items = list(decode_blob_array(minus_one_buffer(10), 'struct', ['a', 'byte', 'a', 'byte']))

        self.assertEqual(items, [{'a': -1}] * 5)
        self.assertEqual(len(cm.output), 1)

    def test_malformed_struct_element(self):
        with self.assertRaises(MalformedSpecError):
            decode_blob_array(minus_one_buffer(2), 'struct', ['odd'])

    def test_element_consuming_nothing(self):
        with self.assertRaises(BlobInvalidArgumentError):
            list(decode_blob_array(minus_one_buffer(2), 'string', 0))

    def test_unknown_element_type(self):
        with self.assertRaises(UnknownFrameTypeError):
            decode_blob_array(minus_one_buffer(2), 'float16')

    def test_sequence_in_spec(self):
        buffer = BlobBuffer(bytes([2, 0, 1, 0, 2]))

        result = decode_blob(buffer, ['count', 'byte', 'items', ('sequence', 'uint16')])

        self.assertEqual(result['count'], 2)
        self.assertEqual(list(result['items']), [1, 2])

    def test_sequence_over_slice(self):
        buffer = BlobBuffer(bytes([0, 1, 0, 2, 0xff]))

        items = decode_blob_array(decode_frame(buffer, 'slice', 4), 'uint16')

        self.assertEqual(decode_frame(buffer, 'ubyte'), 255)
        self.assertEqual(list(items), [1, 2])


if __name__ == '__main__':
    unittest.main()
