import pytest

from app.utils.helpers import (
    derive_upload_filename, describe_secret, get_file_extension,
    normalize_limit, slugify_keyword, strip_client_path
)


def test_derive_upload_filename_slugs_keyword_and_keeps_extension_case():
    assert derive_upload_filename("product shot", "photo.PNG", 1700000000000) == "product-shot-1700000000000.PNG"


def test_derive_upload_filename_defaults_extension_to_jpg():
    assert derive_upload_filename("x", "noext", 1) == "x-1.jpg"


@pytest.mark.parametrize("filename, expected", [
    ("archive.tar.gz", "gz"),
    ("trailing.", "jpg"),
    ("", "jpg"),
    (".hidden", "hidden"),
])
def test_get_file_extension_uses_last_segment(filename, expected):
    assert get_file_extension(filename) == expected


def test_slugify_collapses_each_whitespace_run():
    assert slugify_keyword("summer \t sale\n\nbanner") == "summer-sale-banner"


def test_derive_upload_filename_is_deterministic():
    first = derive_upload_filename("a b", "c.webp", 42)
    assert first == derive_upload_filename("a b", "c.webp", 42) == "a-b-42.webp"


@pytest.mark.parametrize("filename, expected", [
    ("dir.v2/cat", "cat"),
    ("C:\\Users\\me\\photo.png", "photo.png"),
    ("a/b\\c.gif", "c.gif"),
    ("plain.jpg", "plain.jpg"),
    ("trailing/", ""),
])
def test_strip_client_path_keeps_last_component(filename, expected):
    assert strip_client_path(filename) == expected


def test_directory_dots_do_not_become_the_extension():
    assert derive_upload_filename("k", strip_client_path("dir.v2/cat"), 1) == "k-1.jpg"


@pytest.mark.parametrize("raw, expected", [
    (None, 250),
    ("abc", 250),
    ("0", 250),
    ("-4", 250),
    ("10", 10),
    ("1000", 250),
])
def test_normalize_limit(raw, expected):
    assert normalize_limit(raw, 250, 250) == expected


def test_describe_secret_never_returns_the_value():
    token = "shpat_0123456789abcdef0123"
    described = describe_secret(token)
    assert token not in described
    assert str(len(token)) in described
    assert describe_secret("") == "✗ NOT SET"
