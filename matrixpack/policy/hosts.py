"""Blocked host set and the semicolon-delimited host list format."""

from __future__ import annotations

import re
import threading
from typing import Iterable, Iterator

from matrixpack.policy.exceptions import InvalidHostTokenError

HOST_LIST_SEPARATOR = ";"
HOST_LIST_JOINER = "; "
WILDCARD_PREFIX = "*."

_HOST_TOKEN_RE = re.compile(r"^(?:\*\.)?[a-z0-9_-]+(?:\.[a-z0-9_-]+)*$")


def normalize_entry(value: str) -> str:
    return value.strip().lower()


def is_valid_host_token(token: str) -> bool:
    return _HOST_TOKEN_RE.match(normalize_entry(token)) is not None


def normalize_host(host: str) -> str:
    """Lowercase a request host and drop any trailing dot and port suffix."""
    normalized = (host or "").strip().lower()
    if normalized.startswith("["):
        closing = normalized.find("]")
        if closing != -1:
            return normalized[: closing + 1]
        return normalized
    if normalized.count(":") == 1:
        name, _, port = normalized.partition(":")
        if port.isdigit():
            normalized = name
    return normalized.rstrip(".")


def coerce_host_entry(host: str) -> str | None:
    """Normalize a single host for storage, or None when it is not a valid token."""
    normalized = normalize_host(host)
    if _HOST_TOKEN_RE.match(normalized) is None:
        return None
    return normalized


def split_host_list(raw: str) -> list[str]:
    """Split a delimited host list into trimmed, lowercased, non-empty tokens."""
    tokens: list[str] = []
    for part in (raw or "").split(HOST_LIST_SEPARATOR):
        token = normalize_entry(part)
        if token:
            tokens.append(token)
    return tokens


def parse_host_list(raw: str) -> list[str]:
    """Parse a delimited host list into de-duplicated tokens in first-seen order.

    Raises InvalidHostTokenError listing every rejected token; nothing is
    returned for a partially valid list.
    """
    seen: dict[str, None] = {}
    rejected: list[str] = []
    for token in split_host_list(raw):
        if _HOST_TOKEN_RE.match(token) is None:
            if token not in rejected:
                rejected.append(token)
            continue
        seen.setdefault(token, None)
    if rejected:
        raise InvalidHostTokenError(rejected)
    return list(seen)


def format_host_list(entries: Iterable[str]) -> str:
    return HOST_LIST_JOINER.join(entries)


def wildcard_matches(pattern: str, host: str) -> bool:
    base = pattern[len(WILDCARD_PREFIX):]
    if not base:
        return False
    return host == base or host.endswith("." + base)


class BlockedHostSet:
    """Insertion-ordered, case-insensitive set of blocked host entries.

    Entries live in a dict that is never mutated in place: every change builds
    a new dict and swaps the reference, so a reader holding the previous dict
    keeps a complete view of the old state.
    """

    def __init__(self, entries: Iterable[str] = ()) -> None:
        self._lock = threading.Lock()
        initial: dict[str, None] = {}
        for entry in entries:
            normalized = coerce_host_entry(entry)
            if normalized is not None:
                initial.setdefault(normalized, None)
        self._entries = initial

    def __iter__(self) -> Iterator[str]:
        return iter(tuple(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"BlockedHostSet({list(self._entries)!r})"

    @property
    def entries(self) -> tuple[str, ...]:
        return tuple(self._entries)

    def contains(self, host: str) -> bool:
        normalized = normalize_host(host)
        if not normalized:
            return False
        return normalized in self._entries

    def matches(self, host: str) -> bool:
        """Exact membership, or coverage by a ``*.domain`` wildcard entry."""
        normalized = normalize_host(host)
        if not normalized:
            return False
        entries = self._entries
        if normalized in entries:
            return True
        return any(
            wildcard_matches(entry, normalized)
            for entry in entries
            if entry.startswith(WILDCARD_PREFIX)
        )

    def add(self, host: str) -> bool:
        """Store one host; invalid or already present entries are ignored."""
        normalized = coerce_host_entry(host)
        if normalized is None:
            return False
        with self._lock:
            if normalized in self._entries:
                return False
            updated = dict(self._entries)
            updated[normalized] = None
            self._entries = updated
        return True

    def remove(self, host: str) -> bool:
        normalized = normalize_host(host)
        with self._lock:
            if normalized not in self._entries:
                return False
            updated = dict(self._entries)
            del updated[normalized]
            self._entries = updated
        return True

    def clear(self) -> None:
        with self._lock:
            self._entries = {}

    def to_delimited_string(self) -> str:
        return format_host_list(self._entries)

    def replace_all(self, raw: str) -> tuple[bool, str]:
        try:
            tokens = parse_host_list(raw)
        except InvalidHostTokenError as error:
            return False, str(error)
        self.replace_entries(tokens)
        return True, ""

    def replace_entries(self, tokens: Iterable[str]) -> None:
        replacement: dict[str, None] = {}
        for token in tokens:
            normalized = normalize_entry(token)
            if normalized:
                replacement.setdefault(normalized, None)
        with self._lock:
            self._entries = replacement
