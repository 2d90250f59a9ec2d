"""Parsers for board indexes, post-logs, fallback documents and the board directory."""

from chviewer.parsers.bbsmenu import parse_bbsmenu
from chviewer.parsers.dat import dat_title, parse_dat
from chviewer.parsers.fallback import FallbackExtractor, build_default_extractor
from chviewer.parsers.subject import parse_subject

__all__ = [
    "FallbackExtractor",
    "build_default_extractor",
    "dat_title",
    "parse_bbsmenu",
    "parse_dat",
    "parse_subject",
]
