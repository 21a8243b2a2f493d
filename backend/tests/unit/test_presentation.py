from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest
import pytz

from roombook.services.availability_service import TimeSlot
from roombook.services.presentation import (
    build_date_options,
    build_slot_options,
    format_clock,
    format_date_label,
    format_slot_label,
    ordinal_suffix,
)

TORONTO = pytz.timezone("America/Toronto")


def _slot(hour: int, capacity: int = 5) -> TimeSlot:
    starts_at = TORONTO.localize(datetime(2026, 10, 21, hour))
    return TimeSlot(
        starts_at=starts_at,
        ends_at=TORONTO.normalize(starts_at + timedelta(hours=1)),
        available_capacity=capacity,
    )


@pytest.mark.parametrize(
    "day, suffix",
    [
        (1, "st"),
        (2, "nd"),
        (3, "rd"),
        (4, "th"),
        (11, "th"),
        (12, "th"),
        (13, "th"),
        (21, "st"),
        (22, "nd"),
        (23, "rd"),
        (30, "th"),
        (31, "st"),
    ],
)
def test_ordinal_suffix(day: int, suffix: str) -> None:
    assert ordinal_suffix(day) == suffix


def test_format_date_label() -> None:
    assert format_date_label(date(2026, 10, 21)) == "Wednesday - October 21st"
    assert format_date_label(date(2026, 11, 12)) == "Thursday - November 12th"
    assert format_date_label(date(2026, 1, 3)) == "Saturday - January 3rd"


def test_format_clock() -> None:
    assert format_clock(datetime(2026, 10, 21, 0)) == "12:00 AM"
    assert format_clock(datetime(2026, 10, 21, 9)) == "9:00 AM"
    assert format_clock(datetime(2026, 10, 21, 12)) == "12:00 PM"
    assert format_clock(datetime(2026, 10, 21, 14)) == "2:00 PM"


def test_slot_labels() -> None:
    assert format_slot_label(_slot(14)) == "2:00 PM – 3:00 PM"
    assert format_slot_label(_slot(11)) == "11:00 AM – 12:00 PM"


def test_build_date_options_flags_selection() -> None:
    dates = [date(2026, 10, 19) + timedelta(days=offset) for offset in range(3)]
    options = build_date_options(dates, selected=date(2026, 10, 20))

    assert [option.label for option in options] == [
        "Monday - October 19th",
        "Tuesday - October 20th",
        "Wednesday - October 21st",
    ]
    assert [option.selected for option in options] == [False, True, False]


def test_build_slot_options() -> None:
    options = build_slot_options([_slot(9), _slot(14, capacity=3)])

    assert [option.start_hour for option in options] == [9, 14]
    assert options[0].label == "9:00 AM – 10:00 AM"
    assert options[1].description == "Section Capacity: 3"
    assert options[1].available_capacity == 3


def test_build_slot_options_empty() -> None:
    assert build_slot_options([]) == []
