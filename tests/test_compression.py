import gzip
import io

import pytest

from influxwrite.compression import compress_with_gzip

TEXT = (
    "Lorem ipsum dolor sit amet, consectetur adipiscing elit, sed do eiusmod tempor "
    "incididunt ut labore et dolore magna aliqua. Ut enim ad minim veniam, quis nostrud "
    "exercitation ullamco laboris nisi ut aliquip ex ea commodo consequat. Duis aute irure "
    "dolor in reprehenderit in voluptate velit esse cillum dolore eu fugiat nulla pariatur. "
    "Excepteur sint occaecat cupidatat non proident, sunt in culpa qui officia deserunt "
    "mollit anim id est laborum."
)


def test_gzip_round_trip_from_stream():
    compressed = compress_with_gzip(io.BytesIO(TEXT.encode()))
    assert gzip.decompress(compressed).decode() == TEXT


def test_gzip_round_trip_from_bytes_and_str():
    assert gzip.decompress(compress_with_gzip(TEXT.encode())) == TEXT.encode()
    assert gzip.decompress(compress_with_gzip(TEXT)) == TEXT.encode()


def test_gzip_from_text_stream():
    assert gzip.decompress(compress_with_gzip(io.StringIO(TEXT))) == TEXT.encode()


def test_gzip_magic_header():
    assert compress_with_gzip(b"abc")[:2] == b"\x1f\x8b"


def test_gzip_empty():
    assert gzip.decompress(compress_with_gzip(b"")) == b""


def test_gzip_large_stream():
    payload = b"x,y=1 f=2\n" * 20000
    assert gzip.decompress(compress_with_gzip(io.BytesIO(payload))) == payload


def test_gzip_rejects_other_types():
    with pytest.raises(TypeError):
        compress_with_gzip(42)