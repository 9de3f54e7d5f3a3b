"""
CSS color extraction service.

Splits HTML with BeautifulSoup, scans the pieces for color literals in every
supported notation, validates them with the parser, groups them by canonical
hex and ranks the groups by how often they occur.
"""

import re
import threading
import time
from dataclasses import dataclass, field
from typing import Iterable, List, NamedTuple, Optional, Sequence, Tuple, Union

from bs4 import BeautifulSoup, Comment, Doctype
from bs4.element import NavigableString, Tag
from loguru import logger

from .fetch import fetch_html
from .model import Color, ParseError
from .named import NAMED_COLORS
from .parser import parse

DEFAULT_LIMIT = 12
UNKNOWN_TITLE = "Unknown Website"

USAGE_INLINE = "inline"
USAGE_CSS = "css"
USAGE_STYLE = "style"
USAGE_IMAGE = "image"

_NAMES = "|".join(sorted(NAMED_COLORS, key=len, reverse=True))

# Run in this order; every matcher sees the whole fragment
COLOR_PATTERNS: Sequence[Tuple[str, "re.Pattern[str]"]] = (
    # "&#8217;" style entities are not colors
    ("hex", re.compile(r"(?<![&\w])#(?:[0-9a-f]{8}|[0-9a-f]{6}|[0-9a-f]{4}|[0-9a-f]{3})\b", re.I)),
    ("rgb", re.compile(r"\brgba?\([^()]*\)", re.I)),
    ("hsl", re.compile(r"\bhsla?\([^()]*\)", re.I)),
    ("oklch", re.compile(r"\boklch\([^()]*\)", re.I)),
    ("hwb", re.compile(r"\bhwb\([^()]*\)", re.I)),
    ("named", re.compile(rf"(?<![\w#-])(?:{_NAMES})(?![\w-])", re.I)),
    ("modern", re.compile(r"\b(?:color|lab|lch|oklab)\([^()]*\)", re.I)),
)

CSS_COMMENT_RE = re.compile(r"/\*.*?\*/", re.S)

# Text under these tags is never scanned
SKIPPED_TAGS = frozenset({"script", "template"})

TITLE_META = (
    {"property": "og:title"},
    {"name": "twitter:title"},
)


class RawMatch(NamedTuple):
    """A color literal as found in the source text."""
    text: str
    usage: str
    fragment: int
    position: int
    matcher: str


@dataclass(frozen=True)
class ExtractedColorEntry:
    """One deduplicated color with its occurrence count."""
    color: Color
    hex: str
    count: int
    usage: str


@dataclass
class ExtractionResult:
    """Ranked colors and page title from one extraction pass."""
    colors: List[ExtractedColorEntry]
    page_title: str = UNKNOWN_TITLE
    url: Optional[str] = None
    raw_matches: int = 0
    rejected_matches: int = 0
    timings_ms: dict = field(default_factory=dict)

    def hex_colors(self) -> List[str]:
        return [entry.hex for entry in self.colors]


def _blank(match: "re.Match[str]") -> str:
    """Replace a region with spaces so offsets stay valid."""
    return " " * len(match.group(0))


def parse_document(document: Union[str, BeautifulSoup]) -> BeautifulSoup:
    if isinstance(document, BeautifulSoup):
        return document
    return BeautifulSoup(document or "", "lxml")


def _attribute_text(value) -> str:
    # bs4 returns multi-valued attributes such as class as lists
    if isinstance(value, (list, tuple)):
        return " ".join(value)
    return str(value)


def _inside_skipped(node) -> bool:
    return any(parent.name in SKIPPED_TAGS for parent in node.parents)


def split_fragments(document: Union[str, BeautifulSoup]) -> List[Tuple[str, str]]:
    """
    Split a document into scannable fragments in document order.

    Returns:
        List of (usage, fragment_text) where usage is "style" for <style>
        contents, "inline" for style attribute values and "css" for other
        text and attribute values. Plain CSS input comes back as one "css"
        fragment. Comments and <script> contents are dropped.
    """
    soup = parse_document(document)
    fragments = []
    for node in soup.descendants:
        if isinstance(node, Tag):
            if node.name in SKIPPED_TAGS or _inside_skipped(node):
                continue
            for name, value in node.attrs.items():
                usage = USAGE_INLINE if name == "style" else USAGE_CSS
                fragments.append((usage, _attribute_text(value)))
        elif isinstance(node, NavigableString):
            if isinstance(node, (Comment, Doctype)) or _inside_skipped(node):
                continue
            usage = USAGE_STYLE if node.parent.name == "style" else USAGE_CSS
            fragments.append((usage, str(node)))

    return [
        (usage, CSS_COMMENT_RE.sub(_blank, text))
        for usage, text in fragments
        if text.strip()
    ]


def find_color_literals(document: Union[str, BeautifulSoup]) -> List[RawMatch]:
    """
    Collect every raw color literal in a document.

    All matchers run on every fragment without short-circuiting. Matches
    are returned in document order; a literal hit by two matchers shows up
    twice and is resolved later by deduplication.
    """
    matches = []
    for index, (usage, fragment) in enumerate(split_fragments(document)):
        for name, pattern in COLOR_PATTERNS:
            for match in pattern.finditer(fragment):
                matches.append(RawMatch(match.group(0), usage, index, match.start(), name))
    # sorted() is stable, so same-position hits keep matcher order
    return sorted(matches, key=lambda m: (m.fragment, m.position))


def rank_colors(candidates: Iterable[Tuple[Color, str]],
                limit: Optional[int] = DEFAULT_LIMIT) -> List[ExtractedColorEntry]:
    """
    Group colors by hex key, count them and rank by frequency.

    Args:
        candidates: (color, usage) pairs in first-seen order
        limit: Maximum entries to return, None for all

    Returns:
        Entries sorted by count descending; ties keep first-seen order
    """
    return rank_counted(((color, usage, 1) for color, usage in candidates), limit)


def rank_counted(candidates: Iterable[Tuple[Color, str, int]],
                 limit: Optional[int] = DEFAULT_LIMIT) -> List[ExtractedColorEntry]:
    """Like ``rank_colors`` for candidates that already carry a count."""
    groups = {}
    for color, usage, weight in candidates:
        key = color.hex_key()
        group = groups.get(key)
        if group is None:
            groups[key] = [color, weight, usage]
        else:
            group[1] += weight

    entries = [
        ExtractedColorEntry(color=color, hex=key, count=count, usage=usage)
        for key, (color, count, usage) in groups.items()
    ]
    ranked = sorted(entries, key=lambda entry: entry.count, reverse=True)
    return ranked if limit is None else ranked[:limit]


def _validated(matches: Iterable[RawMatch], rejected: List[RawMatch]):
    for match in matches:
        try:
            yield parse(match.text), match.usage
        except ParseError:
            rejected.append(match)


def extract_colors(text: str, limit: Optional[int] = DEFAULT_LIMIT) -> List[ExtractedColorEntry]:
    """
    Extract ranked colors from HTML or CSS text.

    Args:
        text: Raw HTML document, CSS stylesheet or style fragment
        limit: Maximum entries to return (default 12)

    Returns:
        Deduplicated color entries, most frequent first
    """
    return _extract(text, limit)[0]


def _extract(document: Union[str, BeautifulSoup],
             limit: Optional[int]) -> Tuple[List[ExtractedColorEntry], int, int]:
    matches = find_color_literals(document)
    rejected: List[RawMatch] = []
    entries = rank_colors(_validated(matches, rejected), limit)
    if rejected:
        logger.debug(
            f"Discarded {len(rejected)} invalid color literals: "
            f"{', '.join(m.text for m in rejected[:5])}"
        )
    return entries, len(matches), len(rejected)


def extract_page_title(document: Union[str, BeautifulSoup]) -> str:
    """Return <title>, then og:title, then twitter:title, else a placeholder."""
    soup = parse_document(document)
    if soup.title is not None:
        title = soup.title.get_text().strip()
        if title:
            return title
    for attrs in TITLE_META:
        meta = soup.find("meta", attrs=attrs)
        content = meta.get("content") if meta is not None else None
        if isinstance(content, str) and content.strip():
            return content.strip()
    return UNKNOWN_TITLE


def extract_from_text(text: str, limit: Optional[int] = DEFAULT_LIMIT) -> ExtractionResult:
    """Run the full extraction on already-available HTML/CSS text."""
    start = time.time()
    soup = parse_document(text)
    entries, raw, rejected = _extract(soup, limit)
    return ExtractionResult(
        colors=entries,
        page_title=extract_page_title(soup),
        raw_matches=raw,
        rejected_matches=rejected,
        timings_ms={"extract": (time.time() - start) * 1000},
    )


def extract_css_colors(
    url: str,
    limit: Optional[int] = DEFAULT_LIMIT,
    proxies: Optional[Sequence[str]] = None,
    max_attempts: Optional[int] = None,
    timeout: Optional[float] = None,
    cancel_event: Optional[threading.Event] = None,
    session=None,
) -> ExtractionResult:
    """
    Fetch a webpage through the CORS proxies and extract its colors.

    Raises:
        NetworkExtractionError: When every proxy attempt failed
    """
    fetch_start = time.time()
    document = fetch_html(
        url,
        proxies=proxies,
        max_attempts=max_attempts,
        timeout=timeout,
        cancel_event=cancel_event,
        session=session,
    )
    fetch_ms = (time.time() - fetch_start) * 1000

    result = extract_from_text(document, limit)
    result.url = url
    result.timings_ms["fetch"] = fetch_ms
    logger.bind(url=url).info(
        f"Extracted {len(result.colors)} colors from {result.raw_matches} literals"
    )
    return result
