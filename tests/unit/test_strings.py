"""Tests for string helpers."""

from streampatch.strings import hexdump, insert_into


def test_insert_into_keeps_existing_text():
    assert insert_into("HelloWorld", ", ", 5) == "Hello, World"
    assert insert_into("abc", "<", 0) == "<abc"
    assert insert_into("abc", ">", 3) == "abc>"
    assert insert_into("", "x", 0) == "x"


def test_hexdump_text():
    assert hexdump("Hello\r\n") == (
        "\\0x48\\0x65\\0x6c\\0x6c\\0x6f\\0x0d\\0x0a"
    )


def test_hexdump_bytes_and_unicode():
    assert hexdump(b"\x00\xff") == "\\0x00\\0xff"
    assert hexdump("é") == "\\0xc3\\0xa9"
    assert hexdump("") == ""
