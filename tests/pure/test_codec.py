import unittest

from lckernel.lang.error import GenericException
from lckernel.pure.codec import (
    APP_TAG, LAM_TAG, VAR_TAG, CodecError, EmptyInput, IncompleteData, InvalidTag, TrailingData, decode, encode
)
from lckernel.pure.kernel import OMEGA
from lckernel.pure.lexical import app, lam, var


def index_bytes(index):
    return index.to_bytes(8, "little")


class EncodeTestCase(unittest.TestCase):

    def test_layout(self):
        cases = [
            (var(0), bytes([VAR_TAG]) + index_bytes(0)),
            (var(258), bytes([VAR_TAG]) + index_bytes(258)),
            (lam(var(1)), bytes([LAM_TAG, VAR_TAG]) + index_bytes(1)),
            (app(var(0), var(1)), bytes([APP_TAG, VAR_TAG]) + index_bytes(0) + bytes([VAR_TAG]) + index_bytes(1)),
            (app(lam(var(0)), var(2)),
             bytes([APP_TAG, LAM_TAG, VAR_TAG]) + index_bytes(0) + bytes([VAR_TAG]) + index_bytes(2)),
        ]
        for term, expected in cases:
            self.assertEqual(expected, encode(term), term)
            self.assertEqual(term, decode(expected), term)

    def test_index_limit(self):
        largest = var(2 ** 64 - 1)
        self.assertEqual(largest, decode(encode(largest)))
        self.assertRaises(ValueError, encode, var(2 ** 64))

    def test_bytes_like(self):
        data = encode(OMEGA)
        self.assertEqual(OMEGA, decode(bytearray(data)))
        self.assertEqual(OMEGA, decode(memoryview(data)))

    def test_deep_terms(self):
        term = var(0)
        for __ in range(20000):
            term = lam(app(term, var(1)))
        data = encode(term)
        self.assertEqual(20000 * 11 + 9, len(data))
        self.assertEqual(term, decode(data))


class DecodeErrorTestCase(unittest.TestCase):

    def test_empty(self):
        self.assertRaises(EmptyInput, decode, b"")
        self.assertRaises(EmptyInput, decode, bytearray())

    def test_incomplete(self):
        cases = [
            (b"\x01", 0),
            (b"\x01\x00\x00\x00", 0),
            (b"\x02", 1),
            (b"\x02\x02", 2),
            (b"\x03" + bytes([VAR_TAG]) + index_bytes(0), 10),
            (b"\x03\x01", 1),
        ]
        for data, offset in cases:
            with self.assertRaises(IncompleteData, msg=data) as context:
                decode(data)
            self.assertEqual(offset, context.exception.offset, data)

    def test_invalid_tag(self):
        cases = [
            (b"\xff", 0xFF, 0),
            (b"\x00", 0x00, 0),
            (b"\x02\x07", 0x07, 1),
            (b"\x03\x01" + index_bytes(0) + b"\x04", 0x04, 10),
        ]
        for data, tag, offset in cases:
            with self.assertRaises(InvalidTag, msg=data) as context:
                decode(data)
            self.assertEqual(tag, context.exception.tag, data)
            self.assertEqual(offset, context.exception.offset, data)

    def test_trailing(self):
        with self.assertRaises(TrailingData) as context:
            decode(encode(var(0)) + b"\x00")
        self.assertEqual(9, context.exception.offset)

        with self.assertRaises(TrailingData):
            decode(encode(var(0)) + encode(var(1)))

    def test_hierarchy(self):
        for error in (EmptyInput, IncompleteData, InvalidTag, TrailingData):
            self.assertTrue(issubclass(error, CodecError))
            self.assertTrue(issubclass(error, GenericException))


if __name__ == '__main__':
    unittest.main()
