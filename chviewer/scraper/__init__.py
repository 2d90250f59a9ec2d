"""Scraper package — upstream fetches, caching, charsets and URL building."""

from chviewer.scraper.charset import decode_bytes, resolve_charset
from chviewer.scraper.fetcher import ContentFetcher, build_client

__all__ = ["ContentFetcher", "build_client", "decode_bytes", "resolve_charset"]
