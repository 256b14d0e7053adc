"""Link extraction from directory-listing HTML."""

from od_crawler.extraction.links import extract_links

__all__ = ["extract_links"]
