"""Tests for the heuristic event-text extractor.

Covers the line rules and their precedence, the per-line state
transitions, draft emission, the fallback record, and the lines the
extractor knowingly drops.
"""

from __future__ import annotations

import logging
from datetime import datetime

import pytest

from pic_schedule.extractor import (
    FALLBACK_TITLE,
    LINE_RULES,
    UNTITLED_TITLE,
    classify_line,
    extract_events,
    fallback_record,
    finish,
    step,
)
from pic_schedule.models.events import CalendarEventRecord, DraftEvent, ExtractorState

_NOW = datetime(2025, 3, 1, 15, 45, 12)

_TEAM_SYNC = """\
Title: Team Sync
Date: 04/10/2025
Time: 14:30
Details: quarterly planning
"""

# ---------------------------------------------------------------------------
# extract_events
# ---------------------------------------------------------------------------


class TestExtractEvents:
    """End-to-end behaviour of extract_events."""

    def test_single_complete_event(self) -> None:
        """A full Title/Date/Time/Details block gives one record."""
        events = extract_events(_TEAM_SYNC, now=_NOW)

        assert events == [
            CalendarEventRecord(
                title="Team Sync",
                date="2025-04-10T00:00:00",
                time="14:30",
                description="quarterly planning",
            )
        ]

    def test_two_blocks_in_title_order(self) -> None:
        """Each title closes the previous complete draft."""
        text = "Title: Yoga\nDate: 05/01/2025\nTitle: Book Club\nDate: 05/03/2025\n"

        events = extract_events(text, now=_NOW)

        assert [e.title for e in events] == ["Yoga", "Book Club"]
        assert [e.date for e in events] == ["2025-05-01T00:00:00", "2025-05-03T00:00:00"]

    def test_fields_do_not_leak_between_events(self) -> None:
        """A new draft starts empty after the previous one is emitted."""
        text = (
            "Title: Yoga\nDate: 05/01/2025\nTime: 7:00\nDetails: bring a mat\n"
            "Title: Book Club\nDate: 05/03/2025\n"
        )

        second = extract_events(text, now=_NOW)[1]

        assert second.time is None
        assert second.description is None

    def test_empty_title_marker_defaults(self) -> None:
        """'Title:' with nothing after it gives 'Untitled Event'."""
        events = extract_events("Title:\nDate: 06/15/2025", now=_NOW)

        assert events[0].title == UNTITLED_TITLE

    def test_event_marker_is_a_title(self) -> None:
        events = extract_events("Event: Bake Sale\nDate: 06/15/2025", now=_NOW)

        assert events[0].title == "Bake Sale"

    def test_markers_are_case_insensitive(self) -> None:
        text = "TITLE: Gala\nDATE: 06/15/2025\nTIME: 19:00\nDESCRIPTION: black tie"

        event = extract_events(text, now=_NOW)[0]

        assert (event.title, event.time, event.description) == ("Gala", "19:00", "black tie")

    def test_title_keeps_text_after_first_colon(self) -> None:
        events = extract_events("Title: Talk: Intro to Rust\nDate: 06/15/2025", now=_NOW)

        assert events[0].title == "Talk: Intro to Rust"

    def test_continuation_line_becomes_description(self) -> None:
        """A plain line after a title-only draft becomes its description."""
        text = "Title: Potluck\n   Bring a dish to share   \nDate: 07/04/2025"

        events = extract_events(text, now=_NOW)

        assert events[0].description == "Bring a dish to share"

    def test_unmarked_date_and_time_lines(self) -> None:
        """Bare date and time tokens are recognised without markers."""
        text = "Title: Dentist\n7/8/25\n9:15\n"

        event = extract_events(text, now=_NOW)[0]

        assert event.date == "2025-07-08T00:00:00"
        assert event.time == "9:15"

    def test_first_date_on_line_wins(self) -> None:
        text = "Title: Conference\nDate: 09/10/2025 - 09/12/2025"

        assert extract_events(text, now=_NOW)[0].date == "2025-09-10T00:00:00"

    def test_first_time_on_line_wins(self) -> None:
        text = "Title: Workshop\nDate: 09/10/2025\nTime: 1:00 - 3:30"

        assert extract_events(text, now=_NOW)[0].time == "1:00"

    def test_written_date_after_marker(self) -> None:
        """A date marker with no numeric token parses the written date."""
        events = extract_events("Title: Picnic\nDate: April 12", now=_NOW)

        assert events[0].date == "2025-04-12T00:00:00"

    def test_time_marker_without_clock_keeps_text(self) -> None:
        events = extract_events("Title: Party\nDate: 06/15/2025\nTime: 7pm", now=_NOW)

        assert events[0].time == "7pm"

    def test_time_token_is_stored_without_normalizing(self) -> None:
        events = extract_events("Title: Run\nDate: 06/15/2025\nTime: 6:05 AM", now=_NOW)

        assert events[0].time == "6:05"

    def test_unmarked_time_with_attached_meridiem(self) -> None:
        """``7:30pm`` is a time, so a later details line cannot displace it."""
        text = "Title: Yoga\nDate: 04/10/2025\nStarts 7:30pm\nDetails: mats provided"

        event = extract_events(text, now=_NOW)[0]

        assert event.time == "7:30"
        assert event.description == "mats provided"

    @pytest.mark.parametrize("line", ["Time: 10:30AM", "Time: 10:30 AM", "Time: 10:30am"])
    def test_marked_time_token_ignores_meridiem_spacing(self, line: str) -> None:
        text = f"Title: Brunch\nDate: 06/15/2025\n{line}"

        assert extract_events(text, now=_NOW)[0].time == "10:30"

    def test_day_first_numeric_date_is_not_accepted(self) -> None:
        """``13/10/2025`` has no month-first reading, so the draft stays undated."""
        events = extract_events("Title: X\nDate: 13/10/2025", now=_NOW)

        assert len(events) == 1
        assert events[0].title == FALLBACK_TITLE

    def test_final_incomplete_draft_is_not_emitted(self) -> None:
        """A trailing title without a date is dropped."""
        text = "Title: Yoga\nDate: 05/01/2025\nTitle: Someday"

        events = extract_events(text, now=_NOW)

        assert [e.title for e in events] == ["Yoga"]

    def test_title_on_incomplete_draft_replaces_title(self) -> None:
        """A second title before any date overwrites the first."""
        text = "Title: Draft Name\nTitle: Final Name\nDate: 05/01/2025"

        events = extract_events(text, now=_NOW)

        assert len(events) == 1
        assert events[0].title == "Final Name"

    def test_date_before_title_is_kept(self) -> None:
        """Fields seen before the first title stay on the draft."""
        text = "Date: 05/01/2025\nTitle: Early Bird"

        events = extract_events(text, now=_NOW)

        assert events == [CalendarEventRecord(title="Early Bird", date="2025-05-01T00:00:00")]

    def test_blank_lines_are_ignored(self) -> None:
        text = "\n\nTitle: Spaced\n\n\nDate: 05/01/2025\n\n"

        events = extract_events(text, now=_NOW)

        assert events[0].title == "Spaced"
        assert events[0].description is None

    def test_emitted_records_have_valid_dates(self) -> None:
        text = "Title: A\nDate: 01/02/2025\nTitle: B\nDate: someday\nTitle: C\nDate: 03/04/2025"

        events = extract_events(text, now=_NOW)

        assert all(e.has_valid_date for e in events)

    def test_same_input_gives_identical_output(self) -> None:
        assert extract_events(_TEAM_SYNC, now=_NOW) == extract_events(_TEAM_SYNC, now=_NOW)


# ---------------------------------------------------------------------------
# Fallback record
# ---------------------------------------------------------------------------


class TestFallback:
    """When nothing can be assembled a single fallback record is returned."""

    def test_plain_text_gives_fallback(self) -> None:
        events = extract_events("  Just some words on a poster  \n", now=_NOW)

        assert len(events) == 1
        assert events[0].title == FALLBACK_TITLE
        assert events[0].description == "Just some words on a poster"
        assert events[0].date == _NOW.isoformat()

    def test_fallback_description_keeps_inner_lines(self) -> None:
        events = extract_events("line one\nline two", now=_NOW)

        assert events[0].description == "line one\nline two"

    @pytest.mark.parametrize("text", ["", "   ", "\n\n"])
    def test_empty_input_still_returns_one_record(self, text: str) -> None:
        events = extract_events(text, now=_NOW)

        assert len(events) == 1
        assert events[0].title == FALLBACK_TITLE

    def test_title_without_date_gives_fallback(self) -> None:
        events = extract_events("Title: Mystery Event", now=_NOW)

        assert events[0].title == FALLBACK_TITLE
        assert events[0].description == "Title: Mystery Event"

    def test_unparseable_date_gives_fallback(self) -> None:
        """An unreadable date leaves the draft incomplete instead of raising."""
        events = extract_events("Title: Reunion\nDate: TBD", now=_NOW)

        assert events[0].title == FALLBACK_TITLE

    def test_now_defaults_to_current_time(self) -> None:
        before = datetime.now()

        record = extract_events("nothing here")[0]

        assert datetime.fromisoformat(record.date) >= before

    def test_fallback_record_helper(self) -> None:
        record = fallback_record("  text  ", _NOW)

        assert record == CalendarEventRecord(
            title=FALLBACK_TITLE, date=_NOW.isoformat(), description="text"
        )


# ---------------------------------------------------------------------------
# Line rules and precedence
# ---------------------------------------------------------------------------


class TestClassifyLine:
    """The first matching rule of LINE_RULES wins."""

    def test_rule_order(self) -> None:
        assert [rule.name for rule in LINE_RULES] == [
            "title",
            "date",
            "time",
            "description",
            "continuation",
        ]

    @pytest.mark.parametrize(
        ("line", "expected"),
        [
            ("Event: Meeting on 04/10/2025 at 10:00", "title"),
            ("Date: 04/10/2025 at 10:00", "date"),
            ("Details: starts at 10:00", "time"),
            ("Description: due 04/10/2025", "date"),
            ("Details: bring snacks", "description"),
        ],
    )
    def test_precedence(self, line: str, expected: str) -> None:
        rule = classify_line(line, DraftEvent(title="Anything"))

        assert rule is not None
        assert rule.name == expected

    def test_continuation_needs_a_title(self) -> None:
        assert classify_line("free text", DraftEvent()) is None

    def test_continuation_needs_empty_description(self) -> None:
        draft = DraftEvent(title="T", description="already set")

        assert classify_line("free text", draft) is None

    def test_continuation_applies_to_title_only_draft(self) -> None:
        rule = classify_line("free text", DraftEvent(title="T"))

        assert rule is not None
        assert rule.name == "continuation"


class TestKnownLossyLines:
    """Lines matching no rule once a description is set are dropped."""

    def test_stray_line_after_description_is_dropped(self) -> None:
        text = "Title: Fair\nDetails: rides and games\nfree parking\nDate: 08/20/2025"

        events = extract_events(text, now=_NOW)

        assert events[0].description == "rides and games"
        assert all("free parking" not in (e.description or "") for e in events)

    def test_second_continuation_line_is_dropped(self) -> None:
        text = "Title: Fair\nrides and games\nfree parking\nDate: 08/20/2025"

        assert extract_events(text, now=_NOW)[0].description == "rides and games"

    def test_text_before_any_title_is_dropped(self) -> None:
        text = "SPRING NEWSLETTER\nTitle: Fair\nDate: 08/20/2025"

        events = extract_events(text, now=_NOW)

        assert events == [CalendarEventRecord(title="Fair", date="2025-08-20T00:00:00")]

    def test_dropped_line_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG, logger="pic_schedule.extractor"):
            extract_events("SPRING NEWSLETTER\nTitle: Fair\nDate: 08/20/2025", now=_NOW)

        assert "SPRING NEWSLETTER" in caplog.text


# ---------------------------------------------------------------------------
# State transitions
# ---------------------------------------------------------------------------


class TestStep:
    """step() is a pure transition between ExtractorStates."""

    def test_blank_line_returns_same_state(self) -> None:
        state = ExtractorState(draft=DraftEvent(title="T"))

        assert step(state, "   ", _NOW) is state

    def test_step_does_not_modify_input_state(self) -> None:
        state = ExtractorState(draft=DraftEvent(title="T"))

        new_state = step(state, "Date: 01/02/2025", _NOW)

        assert state.draft.date is None
        assert new_state.draft.date == "2025-01-02T00:00:00"

    def test_title_emits_complete_draft(self) -> None:
        state = ExtractorState(draft=DraftEvent(title="A", date="2025-01-02T00:00:00"))

        new_state = step(state, "Title: B", _NOW)

        assert [e.title for e in new_state.events] == ["A"]
        assert new_state.draft == DraftEvent(title="B")

    def test_empty_description_marker_keeps_state(self) -> None:
        state = ExtractorState(draft=DraftEvent(title="A", description="kept"))

        assert step(state, "Details:", _NOW).draft.description == "kept"

    def test_description_marker_overwrites(self) -> None:
        state = ExtractorState(draft=DraftEvent(title="A", description="old"))

        assert step(state, "Details: new", _NOW).draft.description == "new"

    def test_unparseable_date_keeps_state(self) -> None:
        state = ExtractorState(draft=DraftEvent(title="A", date="2025-01-02T00:00:00"))

        assert step(state, "Date: to be announced", _NOW) == state

    def test_out_of_range_month_keeps_state(self) -> None:
        state = ExtractorState(draft=DraftEvent(title="A", date="2025-01-02T00:00:00"))

        assert step(state, "Date: 13/10/2025", _NOW) == state


class TestFinish:
    """finish() flushes the last complete draft."""

    def test_complete_draft_is_appended(self) -> None:
        state = ExtractorState(draft=DraftEvent(title="A", date="2025-01-02T00:00:00"))

        assert [e.title for e in finish(state)] == ["A"]

    def test_incomplete_draft_is_discarded(self) -> None:
        emitted = CalendarEventRecord(title="Done", date="2025-01-01T00:00:00")
        state = ExtractorState(draft=DraftEvent(title="A"), events=(emitted,))

        assert finish(state) == (emitted,)
