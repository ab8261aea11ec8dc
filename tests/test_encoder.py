"""Tests for content encoding."""

import pytest
import segno

from qrwidget import ErrorCorrectionLevel, encode
from qrwidget.encoder import describe
from qrwidget.errors import (
    ContentTooLargeError, CoreError, EmptyContentError, EncodeError, InternalEncodeError,
)


class TestEncode:

    def test_url_at_level_m_is_version_2(self, url_matrix):
        assert url_matrix.version == 2
        assert url_matrix.side == 25
        assert url_matrix.level is ErrorCorrectionLevel.M
        assert all(len(row) == 25 for row in url_matrix.rows)

    def test_matches_segno_symbol(self, url_matrix):
        symbol = segno.make(b"https://example.org", error='M', mode='byte', boost_error=False, micro=False)
        expected = [[bool(v) for v in row] for row in symbol.matrix]
        assert [list(row) for row in url_matrix.rows] == expected
        assert url_matrix.mask == symbol.mask

    def test_deterministic(self):
        assert encode("hello world") == encode("hello world")

    def test_str_and_utf8_bytes_are_equivalent(self):
        assert encode("日本語") == encode("日本語".encode('utf-8'))

    @pytest.mark.parametrize("level, version", [
        (ErrorCorrectionLevel.L, 2),
        (ErrorCorrectionLevel.M, 2),
        (ErrorCorrectionLevel.H, 3),
    ])
    def test_higher_level_never_shrinks_symbol(self, level, version):
        assert encode("https://example.org", level).version == version

    def test_byte_capacity_boundary_at_version_1(self):
        assert encode("a" * 14, ErrorCorrectionLevel.M).version == 1
        assert encode("a" * 15, ErrorCorrectionLevel.M).version == 2

    def test_level_is_not_boosted(self):
        matrix = encode("abc", ErrorCorrectionLevel.L)
        symbol = segno.make(b"abc", error='L', mode='byte', boost_error=False, micro=False)
        assert matrix.level is ErrorCorrectionLevel.L
        assert [list(row) for row in matrix.rows] == [[bool(v) for v in row] for row in symbol.matrix]

    def test_largest_version(self):
        matrix = encode("a" * 2331, ErrorCorrectionLevel.M)
        assert matrix.version == 40
        assert matrix.side == 177


class TestEncodeErrors:

    @pytest.mark.parametrize("content", ["", b""])
    def test_empty_content(self, content):
        with pytest.raises(EmptyContentError):
            encode(content, ErrorCorrectionLevel.Q)

    def test_too_large_at_level_h(self):
        with pytest.raises(ContentTooLargeError) as exc_info:
            encode("x" * 3000, ErrorCorrectionLevel.H)
        assert exc_info.value.length == 3000
        assert exc_info.value.level == "H"
        assert "level H" in str(exc_info.value)

    def test_too_large_one_byte_over_capacity(self):
        with pytest.raises(ContentTooLargeError):
            encode("a" * 2332, ErrorCorrectionLevel.M)

    def test_unsupported_type(self):
        with pytest.raises(InternalEncodeError):
            encode(12345)

    def test_taxonomy(self):
        assert issubclass(EmptyContentError, EncodeError)
        assert issubclass(ContentTooLargeError, EncodeError)
        assert issubclass(EncodeError, CoreError)


def test_describe(url_matrix):
    info = describe(url_matrix)
    assert info['version'] == 2
    assert info['side'] == 25
    assert info['modules'] == 625
    assert info['level'] == "M"
    assert info['level_bits'] == 0
    assert info['dark_modules'] == url_matrix.dark_count


def test_to_array_is_read_only(url_matrix):
    array = url_matrix.to_array()
    assert array.shape == (25, 25)
    with pytest.raises(ValueError):
        array[0, 0] = False
