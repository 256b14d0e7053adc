"""
Tests for the directory-listing link extractor.
"""

import unittest
import urllib.parse

from od_crawler.extraction.links import extract_links
from od_crawler.utils.url import clean_path

from fake_http import listing


BASE = "http://host/root/"


class TestExtractLinks(unittest.TestCase):
    def test_mixed_listing(self):
        html = listing("sub/", "../escape", "file.txt", "?sort=name", "",
                       "http://other.example/x")
        self.assertEqual(
            extract_links(html, BASE),
            ["http://host/root/sub/", "http://host/root/file.txt"],
        )

    def test_query_links_dropped(self):
        html = listing("?C=M;O=A", "file.txt?download=1", "a/b?x")
        self.assertEqual(extract_links(html, BASE), [])

    def test_self_and_parent_references_dropped(self):
        html = listing(" ", ".", "..", "/", "./")
        self.assertEqual(extract_links(html, BASE), [])

    def test_upward_traversal_dropped(self):
        html = listing("a/../../etc/passwd", "../", "sub/../file")
        self.assertEqual(extract_links(html, BASE), [])

    def test_absolute_link_inside_subtree_kept(self):
        html = listing("/root/deep/", "http://host/root/x.iso")
        self.assertEqual(
            extract_links(html, BASE),
            ["http://host/root/deep/", "http://host/root/x.iso"],
        )

    def test_absolute_link_outside_subtree_dropped(self):
        html = listing("/other/", "/", "/rootless.txt", "http://host/")
        self.assertEqual(extract_links(html, BASE), [])

    def test_self_link_dropped(self):
        html = listing("/root/", "http://host/root/", "#top")
        self.assertEqual(extract_links(html, BASE), [])

    def test_scheme_change_dropped(self):
        html = listing("https://host/root/secure/")
        self.assertEqual(extract_links(html, BASE), [])

    def test_port_change_dropped(self):
        html = listing("http://host:8080/root/a/")
        self.assertEqual(extract_links(html, BASE), [])

    def test_order_kept_and_siblings_not_deduplicated(self):
        html = listing("b.txt", "a.txt", "b.txt")
        self.assertEqual(
            extract_links(html, BASE),
            ["http://host/root/b.txt", "http://host/root/a.txt",
             "http://host/root/b.txt"],
        )

    def test_fragment_stripped(self):
        html = listing("notes.txt#section")
        self.assertEqual(extract_links(html, BASE), ["http://host/root/notes.txt"])

    def test_only_anchors_considered(self):
        html = (
            '<html><head><link href="style.css" rel="stylesheet"></head>'
            '<body><img src="icon.gif"><a href="real.bin">real</a></body></html>'
        )
        self.assertEqual(extract_links(html, BASE), ["http://host/root/real.bin"])

    def test_anchor_without_href_ignored(self):
        html = '<a name="top">top</a><a href="x.zip">x</a>'
        self.assertEqual(extract_links(html, BASE), ["http://host/root/x.zip"])

    def test_first_href_wins(self):
        html = '<a href="first.txt" href="second.txt">f</a>'
        self.assertEqual(extract_links(html, BASE), ["http://host/root/first.txt"])

    def test_accepts_bytes(self):
        html = listing("data.csv").encode("utf-8")
        self.assertEqual(extract_links(html, BASE), ["http://host/root/data.csv"])

    def test_percent_encoded_names(self):
        html = listing("My%20Files/")
        self.assertEqual(extract_links(html, BASE), ["http://host/root/My%20Files/"])

    def test_encoded_upward_traversal_dropped(self):
        html = listing("%2e%2e/secret.txt", "%2E%2E/etc/", "sub/%2e%2e/%2e%2e/x",
                       ".%2e/y", "%2e/")
        self.assertEqual(extract_links(html, BASE), [])

    def test_duplicate_slashes_collapsed(self):
        html = listing("/root//", "///root/", "sub//", "a//b.txt", "sub/./c/")
        self.assertEqual(
            extract_links(html, BASE),
            ["http://host/root/sub/", "http://host/root/a/b.txt",
             "http://host/root/sub/c/"],
        )

    def test_garbage_body(self):
        self.assertEqual(extract_links(b"Index unavailable\n", BASE), [])

    def test_filter_soundness(self):
        """Whatever the listing contains, survivors stay strictly inside
        the base path on the same origin, without queries or ``../``."""
        hrefs = [
            "a/", "b.txt", "../x", "./c/", "/root/d/", "/root", "/rootx/",
            "//host/root/e", "//evil/root/f", "g?h", "?i", "j/../k",
            "ftp://host/root/l", "HTTP://HOST/root/m", "%2e%2e/n",
            "%2E%2e//n2", "/root//", "sub//",
            "mailto:a@b", "javascript:void(0)", "", " ", ".", "..", "/",
        ]
        base = urllib.parse.urlsplit(BASE)
        for link in extract_links(listing(*hrefs), BASE):
            parts = urllib.parse.urlsplit(link)
            with self.subTest(link=link):
                self.assertEqual(parts.scheme.lower(), base.scheme)
                self.assertEqual(parts.netloc.lower(), base.netloc)
                self.assertTrue(parts.path.startswith(base.path))
                resolved = clean_path(urllib.parse.unquote(parts.path))
                self.assertTrue(resolved.startswith(base.path))
                self.assertNotIn("//", parts.path)
                self.assertNotEqual(parts.path, base.path)
                self.assertNotIn("../", link)
                self.assertEqual(parts.query, "")


if __name__ == "__main__":
    unittest.main()
