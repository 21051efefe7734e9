"""Text normalization strategies.

A normalization function is a pure `str -> str` callable. Matchers apply the same
function to catalog entries and to queries, so a strategy is chosen once per matcher
and never per call.
"""

from __future__ import annotations
import re
import unicodedata
from typing import Callable, List

NormalizationFn = Callable[[str], str]

# Front-matter block ("---\n ... ---\n") as found in SPDX-style license files.
_PREAMBLE_RE = re.compile(r"---\n[\s\S]+---\n")
_WHITESPACE_RE = re.compile(r"\s+")


def normalize_unicode_nfc(text: str) -> str:
    """Apply Unicode NFC (Canonical Composition) normalization."""
    if not text:
        return text
    return unicodedata.normalize("NFC", text)


def strip_preamble(text: str) -> str:
    """Remove the structured preamble delimited by `---` marker lines."""
    return _PREAMBLE_RE.sub("", text)


def strip_whitespace(text: str) -> str:
    """Remove every whitespace character (spaces, tabs, line breaks)."""
    return _WHITESPACE_RE.sub("", text)


def normalize_license_text(text: str) -> str:
    """Default strategy: drop the preamble, then all whitespace."""
    return strip_whitespace(strip_preamble(text))


def make_normalizer(
    strip_preamble_block: bool = True,
    strip_all_whitespace: bool = True,
    unicode_nfc: bool = False,
) -> NormalizationFn:
    """Compose a normalization strategy from the individual steps.

    Steps run in a fixed order (NFC, preamble, whitespace) so that two normalizers
    built from the same flags are interchangeable.
    """
    steps: List[NormalizationFn] = []
    if unicode_nfc:
        steps.append(normalize_unicode_nfc)
    if strip_preamble_block:
        steps.append(strip_preamble)
    if strip_all_whitespace:
        steps.append(strip_whitespace)

    def _normalize(text: str) -> str:
        for step in steps:
            text = step(text)
        return text

    return _normalize
