from datetime import date, datetime, timedelta, timezone

from clearcache.backend.models import Entry
from clearcache.journal import (NO_CONTENT, UNTITLED, ensure_heading,
                                entries_by_day, entry_title, extract_title,
                                filter_entries, format_day, format_timestamp,
                                plain_text, preview)

BASE = datetime(2025, 3, 5, 12, 0)


def make_entry(entry_id: str, title: str | None, content: str | None, hours: int = 0) -> Entry:
    moment = BASE + timedelta(hours=hours)
    return Entry(entry_id, "u", title, content, moment, moment)


def test_extract_title_strips_heading_markers():
    assert extract_title("# My day\nIt was fine") == "My day"
    assert extract_title("\n\n  ### Deep  \nx") == "Deep"


def test_extract_title_of_empty_content():
    assert extract_title("") == UNTITLED
    assert extract_title(None) == UNTITLED
    assert extract_title("#   \n") == UNTITLED


def test_html_content_is_flattened():
    assert plain_text("<h1>Hi</h1><p>there &amp; back</p>") == "Hi\nthere & back\n"
    assert extract_title("<h1>Hi</h1><p>there</p>") == "Hi"


def test_entry_title_prefers_the_stored_title():
    assert entry_title(make_entry("1", "Stored", "# Other")) == "Stored"
    assert entry_title(make_entry("1", "  ", "# Other")) == "Other"


def test_preview_skips_the_title_line():
    assert preview("# Title\nfirst\nsecond") == "first second"
    assert preview("only line") == "only line"
    assert preview("") == NO_CONTENT


def test_preview_is_truncated():
    text = preview("# T\n" + "x" * 150)
    assert text == "x" * 100 + "..."


def test_ensure_heading():
    assert ensure_heading("Title\nbody") == "# Title\nbody"
    assert ensure_heading("\n## Title\nbody") == "\n# Title\nbody"
    assert ensure_heading("# Title") == "# Title"
    assert ensure_heading("") == ""


def test_filter_entries_searches_title_and_content():
    entries = [
        make_entry("1", "Coffee", "morning notes", 0),
        make_entry("2", "Walk", "saw a COFFEE shop", 1),
        make_entry("3", "Work", "meetings", 2),
    ]
    assert [e.id for e in filter_entries(entries, "coffee")] == ["2", "1"]
    assert [e.id for e in filter_entries(entries, "coffee", newest_first=False)] == ["1", "2"]
    assert [e.id for e in filter_entries(entries, "  ")] == ["3", "2", "1"]


def test_entries_by_day_groups_naive_times():
    entries = [make_entry("1", "a", "", 0), make_entry("2", "b", "", 1), make_entry("3", "c", "", 24)]
    days = entries_by_day(entries)
    assert {day: [e.id for e in found] for day, found in days.items()} == {
        date(2025, 3, 5): ["1", "2"],
        date(2025, 3, 6): ["3"],
    }


def test_format_timestamp():
    assert format_timestamp(datetime(2025, 3, 5, 9, 41)) == "Mar 5, 2025, 09:41 AM"


def test_format_timestamp_accepts_aware_times():
    assert format_timestamp(datetime(2025, 3, 5, 9, 41, tzinfo=timezone.utc)).endswith("M")


def test_format_day():
    assert format_day(date(2025, 3, 5)) == "Wednesday, March 5, 2025"
