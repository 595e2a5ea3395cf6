"""Text helpers for journal entries: titles, previews, search and dates."""
from __future__ import annotations

import html
import re
from datetime import date, datetime
from typing import Iterable

from clearcache.backend.models import Entry

UNTITLED = "Untitled Entry"
NO_CONTENT = "No content"
PREVIEW_LENGTH = 100

_TAG = re.compile(r"<[^>]+>")
_BLOCK_END = re.compile(r"</(div|p|h[1-6]|li)>|<br\s*/?>", re.IGNORECASE)
_HEADING = re.compile(r"^\s{0,3}#{1,6}(?:\s+|$)")


def plain_text(content: str | None) -> str:
    """Strips markup from stored content, keeping one line per block."""
    if not content:
        return ""
    text = _BLOCK_END.sub("\n", content)
    text = _TAG.sub("", text)
    return html.unescape(text)


def _lines(content: str | None) -> list[str]:
    return [line.strip() for line in plain_text(content).splitlines() if line.strip()]


def extract_title(content: str | None) -> str:
    """The first non-blank line, without heading markers."""
    lines = _lines(content)
    if not lines:
        return UNTITLED
    return _HEADING.sub("", lines[0]).strip() or UNTITLED


def entry_title(entry: Entry) -> str:
    return (entry.title or "").strip() or extract_title(entry.content)


def preview(content: str | None, length: int = PREVIEW_LENGTH) -> str:
    """Everything after the title line, joined, cut at `length` characters."""
    lines = _lines(content)
    if not lines:
        return NO_CONTENT
    text = " ".join(lines[1:]) if len(lines) > 1 else lines[0]
    return text[:length] + "..." if len(text) > length else text


def ensure_heading(markdown: str) -> str:
    """Forces the first non-blank line to be a level-one heading."""
    lines = markdown.split("\n")
    for index, line in enumerate(lines):
        if line.strip():
            lines[index] = "# " + _HEADING.sub("", line).strip()
            break
    return "\n".join(lines)


def matches(entry: Entry, query: str) -> bool:
    query = query.strip().lower()
    if not query:
        return True
    return query in (entry.title or "").lower() or query in (entry.content or "").lower()


def filter_entries(entries: Iterable[Entry], query: str = "", newest_first: bool = True) -> list[Entry]:
    found = [e for e in entries if matches(e, query)]
    return sorted(found, key=lambda e: e.created_at, reverse=newest_first)


def entries_by_day(entries: Iterable[Entry]) -> dict[date, list[Entry]]:
    days: dict[date, list[Entry]] = {}
    for entry in entries:
        days.setdefault(local_day(entry.created_at), []).append(entry)
    return days


def local_day(moment: datetime) -> date:
    return moment.astimezone().date() if moment.tzinfo else moment.date()


def format_timestamp(moment: datetime) -> str:
    """e.g. 'Mar 5, 2025, 09:41 AM'"""
    local = moment.astimezone() if moment.tzinfo else moment
    return f"{local:%b} {local.day}, {local:%Y, %I:%M %p}"


def format_day(day: date) -> str:
    return f"{day:%A, %B} {day.day}, {day:%Y}"
