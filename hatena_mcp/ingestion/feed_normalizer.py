"""
Feed Normalizer
===============

Converts a parsed RSS 2.0 or Atom document into uniform ``Post`` records.

The document is the mapping produced by ``feedparser``: a ``version`` string
and an ``entries`` list. Each field of a post is resolved through an ordered
tuple of candidate lookups; the first candidate yielding a non-empty value
wins, otherwise the field falls back to an empty string or empty list.
"""

import re
from dataclasses import dataclass, field, asdict
from typing import Any, Callable, Dict, List, Mapping, Sequence, Tuple

SUMMARY_MAX_LENGTH = 500

HTML_TAG_PATTERN = re.compile(r"<[^>]*>")


@dataclass(frozen=True)
class Post:
    """Normalized blog post. Every field is always present."""

    title: str = ""
    link: str = ""
    published: str = ""
    updated: str = ""
    summary: str = ""
    categories: Tuple[str, ...] = field(default_factory=tuple)
    content: str = ""

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["categories"] = list(self.categories)
        return data

    def search_text(self) -> str:
        """Lowercased haystack used for keyword matching."""
        return f"{self.title} {self.summary} {' '.join(self.categories)}".lower()


@dataclass(frozen=True)
class FeedEntries:
    """Entry list of a document together with its shape discriminant."""

    is_atom: bool
    entries: Sequence[Mapping[str, Any]]


def strip_html(text: str, max_length: int = SUMMARY_MAX_LENGTH) -> str:
    """Remove HTML tags with a regex and cut to ``max_length`` characters."""
    return HTML_TAG_PATTERN.sub("", text)[:max_length]


def resolve_entries(document: Any) -> FeedEntries:
    """Pick the entry list out of a parsed document.

    Documents without entries, or whose entries are not a list, resolve to
    an empty list instead of raising.
    """
    if not isinstance(document, Mapping):
        return FeedEntries(is_atom=False, entries=[])

    version = document.get("version") or ""
    is_atom = isinstance(version, str) and version.startswith("atom")

    entries = document.get("entries")
    if not isinstance(entries, (list, tuple)):
        return FeedEntries(is_atom=is_atom, entries=[])

    return FeedEntries(
        is_atom=is_atom,
        entries=[entry for entry in entries if isinstance(entry, Mapping)],
    )


# Candidate lookups -------------------------------------------------------

Candidate = Callable[[Mapping[str, Any]], Any]


def _text(key: str) -> Candidate:
    def lookup(entry: Mapping[str, Any]) -> Any:
        value = entry.get(key)
        return value if isinstance(value, str) else None
    return lookup


def _first_href(key: str) -> Candidate:
    def lookup(entry: Mapping[str, Any]) -> Any:
        items = entry.get(key)
        if isinstance(items, (list, tuple)) and items and isinstance(items[0], Mapping):
            return items[0].get("href")
        return None
    return lookup


def _first_value(key: str) -> Candidate:
    def lookup(entry: Mapping[str, Any]) -> Any:
        items = entry.get(key)
        if isinstance(items, (list, tuple)) and items:
            first = items[0]
            if isinstance(first, Mapping):
                return first.get("value")
            return first
        return None
    return lookup


def first_present(entry: Mapping[str, Any], candidates: Sequence[Candidate]) -> str:
    """Return the first non-empty string produced by ``candidates``."""
    for candidate in candidates:
        value = candidate(entry)
        if isinstance(value, str) and value:
            return value
    return ""


TITLE_CANDIDATES = (_text("title"),)
LINK_CANDIDATES = (_first_href("links"), _text("link"))
# feedparser files both <updated> and Dublin-Core <dc:date> under "updated".
# For RSS that key can only hold dc:date, so it is the published fallback.
RSS_PUBLISHED_CANDIDATES = (_text("published"), _text("updated"))
ATOM_PUBLISHED_CANDIDATES = (_text("published"),)
UPDATED_CANDIDATES = (_text("updated"),)
BODY_CANDIDATES = (_text("summary"), _first_value("content"))


def extract_categories(entry: Mapping[str, Any]) -> Tuple[str, ...]:
    tags = entry.get("tags")
    if not isinstance(tags, (list, tuple)):
        return ()

    categories: List[str] = []
    for tag in tags:
        value = (tag.get("term") or tag.get("label")) if isinstance(tag, Mapping) else tag
        if value and isinstance(value, str):
            categories.append(value)
    return tuple(categories)


def extract_post(entry: Mapping[str, Any], is_atom: bool = False) -> Post:
    """Normalize a single feed entry."""
    published_candidates = ATOM_PUBLISHED_CANDIDATES if is_atom else RSS_PUBLISHED_CANDIDATES
    body = first_present(entry, BODY_CANDIDATES)

    return Post(
        title=first_present(entry, TITLE_CANDIDATES),
        link=first_present(entry, LINK_CANDIDATES),
        published=first_present(entry, published_candidates),
        updated=first_present(entry, UPDATED_CANDIDATES),
        summary=strip_html(body),
        categories=extract_categories(entry),
        content=body,
    )


def extract_posts(document: Any) -> List[Post]:
    """Normalize every entry of ``document``, preserving feed order."""
    resolved = resolve_entries(document)
    return [extract_post(entry, resolved.is_atom) for entry in resolved.entries]


def matches_keyword(post: Post, keyword: str) -> bool:
    """Case-insensitive substring match over title, summary and categories."""
    return keyword.lower() in post.search_text()
