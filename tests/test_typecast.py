import unittest

from atmfjstc.lib.blob_decode.typecast import to_unsigned, byte_to_ubyte, short_to_ushort, int_to_uint, long_to_ulong


class ToUnsignedTest(unittest.TestCase):
    def test_minus_one(self):
        self.assertEqual(byte_to_ubyte(-1), 255)
        self.assertEqual(short_to_ushort(-1), 65535)
        self.assertEqual(int_to_uint(-1), 4294967295)
        self.assertEqual(long_to_ulong(-1), 18446744073709551615)

    def test_most_negative(self):
        self.assertEqual(byte_to_ubyte(-128), 128)
        self.assertEqual(long_to_ulong(-(1 << 63)), 1 << 63)

    def test_non_negative_unchanged(self):
        self.assertEqual(short_to_ushort(514), 514)
        self.assertEqual(int_to_uint(0), 0)
        self.assertEqual(long_to_ulong((1 << 63) - 1), (1 << 63) - 1)

    def test_odd_width(self):
        self.assertEqual(to_unsigned(-1, 24), 0xFFFFFF)

    def test_out_of_range(self):
        with self.assertRaises(ValueError):
            byte_to_ubyte(128)
        with self.assertRaises(ValueError):
            byte_to_ubyte(-129)

    def test_bad_width(self):
        with self.assertRaises(ValueError):
            to_unsigned(0, 0)


if __name__ == '__main__':
    unittest.main()
