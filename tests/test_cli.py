"""Tests for the JSON adapter and the debris command-line interface."""

from __future__ import annotations

import contextlib
import io
import json
import os
import sys
import tempfile
import unittest
from collections import OrderedDict
from decimal import Decimal

import structlog

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from debris import (
    ERR_TRUNCATED_INPUT,
    InvalidText,
    UnsupportedType,
    deserialize,
    fingerprint,
    serialize,
)
from debris._cli import main
from debris._json_adapter import json_to_value, value_to_json


# ── JSON → value ─────────────────────────────────────────────

class TestJsonToValue(unittest.TestCase):
    def test_floats_become_decimals(self):
        val = json_to_value(b'{"n": 1.50}')
        self.assertEqual(val, {"n": Decimal("1.50")})
        self.assertIn(b"1.50", serialize(val))

    def test_plain_types(self):
        val = json_to_value(b'{"a": [true, 3, "x"]}')
        self.assertEqual(val, {"a": [True, 3, "x"]})

    def test_long_integer(self):
        val = json_to_value(b"1" + b"0" * 5000)
        self.assertIsInstance(val, Decimal)
        self.assertEqual(serialize(val), serialize(10**5000))

    def test_null_rejected(self):
        with self.assertRaises(UnsupportedType):
            json_to_value(b'{"k": [null]}')

    def test_nan_rejected(self):
        with self.assertRaises(UnsupportedType):
            json_to_value(b'{"k": NaN}')

    def test_bom_rejected(self):
        with self.assertRaises(InvalidText):
            json_to_value(b'\xef\xbb\xbf{"a": "b"}')

    def test_invalid_utf8(self):
        with self.assertRaises(InvalidText):
            json_to_value(b'{"k": "\xff"}')


# ── value → JSON ─────────────────────────────────────────────

class TestValueToJson(unittest.TestCase):
    def test_numbers(self):
        self.assertEqual(value_to_json(Decimal("10")), 10)
        self.assertEqual(value_to_json(Decimal("2.5")), 2.5)
        self.assertIsInstance(value_to_json(Decimal("1.0")), float)

    def test_bytes(self):
        self.assertEqual(value_to_json(b"\x00\xff"), {"$bytes": "00ff"})

    def test_set_in_canonical_order(self):
        self.assertEqual(value_to_json({"aa", "b", Decimal(9)}), [9, "b", "aa"])

    def test_map_keys(self):
        out = value_to_json({True: "t", "s": "x", (Decimal(1), "a"): "y"})
        self.assertEqual(out, {"true": "t", "s": "x", '[1,"a"]': "y"})

    def test_colliding_keys_rejected(self):
        for decoded in ({"1": "a", Decimal(1): "b"},
                        OrderedDict([("true", 1), (True, 2)])):
            with self.subTest(decoded=decoded):
                with self.assertRaises(UnsupportedType):
                    value_to_json(decoded)

    def test_ordered_map_keeps_order(self):
        out = value_to_json(OrderedDict([("z", 1), ("a", 2)]))
        self.assertEqual(list(out), ["z", "a"])

    def test_decoded_value(self):
        decoded = deserialize(serialize({"a": [1, 2.5, {b"k"}]}))
        self.assertEqual(value_to_json(decoded), {"a": [1, 2.5, [{"$bytes": "6b"}]]})


# ── CLI ──────────────────────────────────────────────────────

class TestCli(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()

    def tearDown(self):
        self._tmp.cleanup()
        structlog.reset_defaults()

    def _write(self, name: str, data: bytes) -> str:
        path = os.path.join(self._tmp.name, name)
        with open(path, "wb") as f:
            f.write(data)
        return path

    def _run(self, *argv: str) -> str:
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            main(list(argv))
        return out.getvalue().strip()

    def _run_failing(self, *argv: str) -> str:
        err = io.StringIO()
        with contextlib.redirect_stderr(err), self.assertRaises(SystemExit) as ctx:
            main(list(argv))
        self.assertEqual(ctx.exception.code, 2)
        return err.getvalue()

    def test_encode_hex(self):
        path = self._write("in.json", b'{"b": 1, "a": [true]}')
        self.assertEqual(self._run("encode", "--input", path),
                         serialize({"a": [True], "b": 1}).hex())

    def test_encode_base64(self):
        path = self._write("in.json", b'"x"')
        self.assertEqual(self._run("encode", "-i", path, "--format", "base64"),
                         "AwAAAAF4")

    def test_decode_hex(self):
        path = self._write("in.hex", serialize({"a": [1, "x"]}).hex().encode())
        self.assertEqual(json.loads(self._run("decode", "--input", path)),
                         {"a": [1, "x"]})

    def test_decode_raw(self):
        path = self._write("in.bin", serialize([2.5, b"\x01"]))
        self.assertEqual(json.loads(self._run("decode", "-i", path, "-f", "raw")),
                         [2.5, {"$bytes": "01"}])

    def test_decode_strict_trailing(self):
        path = self._write("in.bin", serialize(1) + b"\x00")
        self.assertIn("ERR_TRAILING_DATA",
                      self._run_failing("decode", "-i", path, "-f", "raw", "--strict"))

    def test_decode_truncated(self):
        path = self._write("in.hex", b"0300000005")
        self.assertIn(ERR_TRUNCATED_INPUT, self._run_failing("decode", "-i", path))

    def test_decode_bad_hex(self):
        path = self._write("in.hex", b"zz")
        self.assertIn("cannot read hex input", self._run_failing("decode", "-i", path))

    def test_digest(self):
        path = self._write("in.json", b'{"y": 2, "x": 1}')
        self.assertEqual(self._run("digest", "-i", path), fingerprint({"x": 1, "y": 2}))

    def test_encode_json_error(self):
        path = self._write("in.json", b'{"a": ')
        self.assertIn("JSON parse error", self._run_failing("encode", "-i", path))

    def test_encode_null(self):
        path = self._write("in.json", b'[null]')
        self.assertIn("ERR_UNSUPPORTED_TYPE", self._run_failing("encode", "-i", path))

    def test_decode_colliding_keys(self):
        path = self._write("in.hex", serialize({"1": "a", 1: "b"}).hex().encode())
        self.assertIn("ERR_UNSUPPORTED_TYPE", self._run_failing("decode", "-i", path))

    def test_encode_long_integer(self):
        path = self._write("in.json", b"[" + b"7" * 5000 + b"]")
        self.assertEqual(self._run("encode", "-i", path),
                         serialize([Decimal("7" * 5000)]).hex())

    def test_encode_deeply_nested_json(self):
        path = self._write("in.json", b"[" * 100000 + b"]" * 100000)
        self.assertIn("debris: cannot process input",
                      self._run_failing("encode", "-i", path))

    def test_version(self):
        self.assertTrue(self._run("version").startswith("debris "))


if __name__ == "__main__":
    unittest.main()
