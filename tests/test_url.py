"""
Tests for URL normalisation and path helpers.
"""

import unittest

from od_crawler.utils.url import (
    UnsupportedSchemeError,
    clean_path,
    is_dir_url,
    normalise_cli_url,
    parse_root_url,
    tidy_path,
    url_key,
    url_path,
)


class TestCleanPath(unittest.TestCase):
    def test_cases(self):
        cases = {
            "": "/",
            "/": "/",
            "a/b": "/a/b",
            "/a//b/": "/a/b",
            "/a/./b/../c": "/a/c",
            "/../../x": "/x",
        }
        for raw, expected in cases.items():
            with self.subTest(raw=raw):
                self.assertEqual(clean_path(raw), expected)


class TestTidyPath(unittest.TestCase):
    def test_trailing_slash_kept(self):
        cases = {
            "/root//": "/root/",
            "///root/sub/./": "/root/sub/",
            "/a//b.txt": "/a/b.txt",
            "/a/../": "/",
            "": "/",
        }
        for raw, expected in cases.items():
            with self.subTest(raw=raw):
                self.assertEqual(tidy_path(raw), expected)


class TestUrlKey(unittest.TestCase):
    def test_equivalent_spellings_share_key(self):
        key = url_key("http://host/a/b/")
        for variant in ("HTTP://Host/a/b/", "http://host/a//b/",
                        "http://host/a/./b/", "http://host/a/%62/"):
            with self.subTest(variant=variant):
                self.assertEqual(url_key(variant), key)

    def test_file_and_directory_differ(self):
        self.assertNotEqual(url_key("http://host/a/b"), url_key("http://host/a/b/"))


class TestUrlPath(unittest.TestCase):
    def test_percent_decoded(self):
        self.assertEqual(url_path("http://host/My%20Files/a%2Bb.txt?x=1"),
                         "/My Files/a+b.txt")

    def test_is_dir_url(self):
        self.assertTrue(is_dir_url("http://host/pub/"))
        self.assertTrue(is_dir_url("http://host/pub/#frag"))
        self.assertFalse(is_dir_url("http://host/pub"))
        self.assertFalse(is_dir_url("http://host"))


class TestParseRootUrl(unittest.TestCase):
    def test_trailing_slash_added(self):
        self.assertEqual(parse_root_url("http://host/pub"), "http://host/pub/")

    def test_bare_host(self):
        self.assertEqual(parse_root_url("https://host"), "https://host/")

    def test_scheme_and_host_lowercased(self):
        self.assertEqual(parse_root_url("HTTP://Example.COM:8080/Pub/"),
                         "http://example.com:8080/Pub/")

    def test_fragment_dropped(self):
        self.assertEqual(parse_root_url("http://host/pub/#top"), "http://host/pub/")

    def test_unsupported_scheme(self):
        for raw in ("ftp://host/pub/", "file:///etc/", "gopher://host/"):
            with self.subTest(raw=raw):
                with self.assertRaises(UnsupportedSchemeError):
                    parse_root_url(raw)

    def test_unsupported_scheme_is_value_error(self):
        with self.assertRaises(ValueError) as cm:
            parse_root_url("ftp://host/")
        self.assertEqual(cm.exception.scheme, "ftp")

    def test_missing_host(self):
        with self.assertRaises(ValueError) as cm:
            parse_root_url("http:///pub/")
        self.assertNotIsInstance(cm.exception, UnsupportedSchemeError)


class TestNormaliseCliUrl(unittest.TestCase):
    def test_scheme_added(self):
        self.assertEqual(normalise_cli_url("host/pub"), "http://host/pub/")

    def test_explicit_scheme_kept(self):
        self.assertEqual(normalise_cli_url(" https://host/pub/ "), "https://host/pub/")

    def test_explicit_unsupported_scheme(self):
        with self.assertRaises(UnsupportedSchemeError):
            normalise_cli_url("ftp://host/pub/")


if __name__ == "__main__":
    unittest.main()
