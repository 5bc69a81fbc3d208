"""
Tests for parse_extensions.
"""
from filemagic.extensions import parse_extensions


def test_empty_string_gives_empty_set():
    assert parse_extensions("") == set()


def test_single_token():
    assert parse_extensions("png") == {"png"}


def test_multiple_tokens_order_irrelevant():
    assert parse_extensions("jpeg/jpg/jpe") == {"jpe", "jpg", "jpeg"}


def test_duplicates_collapse():
    assert parse_extensions("tif/tiff/tif") == {"tif", "tiff"}


def test_stray_separators_are_ignored():
    assert parse_extensions("/gz/") == {"gz"}


def test_unknown_marker_is_kept():
    assert parse_extensions("???") == {"???"}


def test_result_is_immutable():
    assert isinstance(parse_extensions("png"), frozenset)
