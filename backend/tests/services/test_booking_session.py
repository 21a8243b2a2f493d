from __future__ import annotations

from datetime import date, timedelta
from unittest.mock import Mock

import pytest

from roombook.core.exceptions import (
    InvalidSelectionException,
    RepositoryException,
    SessionExpiredException,
    SessionOwnershipException,
    StoreUnavailableException,
)
from roombook.services.availability_service import AvailabilityService
from roombook.services.booking_session import BookingSession, SessionState
from roombook.services.reservation_service import CommitOutcome, CommitStatus, ReservationService
from roombook.services.schedule import RoomInfo, SectionInfo

WEDNESDAY = date(2026, 10, 21)
THURSDAY = date(2026, 10, 22)


@pytest.fixture
def now(at):
    return at(2026, 10, 21, 10, 30)


@pytest.fixture
def session(catalog, tz) -> BookingSession:
    return BookingSession(
        user_id="user-1",
        room=RoomInfo.from_model(catalog["room"]),
        section=SectionInfo.from_model(catalog["section"]),
        tz=tz,
    )


@pytest.fixture
def finder(db, tz) -> AvailabilityService:
    return AvailabilityService(db, tz=tz)


@pytest.fixture
def committer(db) -> ReservationService:
    return ReservationService(db)


class TestChooseDate:
    def test_starts_awaiting_date(self, session) -> None:
        assert session.state is SessionState.AWAITING_DATE
        assert session.slots == []
        assert session.selected_date is None

    def test_selectable_window_is_fourteen_days_from_today(self, session, now) -> None:
        dates = session.selectable_dates(now)

        assert len(dates) == 14
        assert dates[0] == WEDNESDAY
        assert dates[-1] == WEDNESDAY + timedelta(days=13)

    def test_choose_date_offers_slots(self, session, finder, now) -> None:
        slots = session.choose_date(WEDNESDAY, finder, now=now)

        assert session.state is SessionState.AWAITING_SLOT
        assert session.selected_date == WEDNESDAY
        assert session.offered_hours == [10, 11, 12, 13, 14, 15, 16]
        assert slots == session.slots

    def test_choosing_again_replaces_offer(self, session, finder, now) -> None:
        session.choose_date(WEDNESDAY, finder, now=now)
        session.choose_date(THURSDAY, finder, now=now)

        assert session.state is SessionState.AWAITING_SLOT
        assert session.selected_date == THURSDAY
        assert session.offered_hours == list(range(9, 17))

    def test_date_with_nothing_open_still_awaits_slot(self, session, finder, now) -> None:
        session.choose_date(date(2026, 10, 24), finder, now=now)

        assert session.state is SessionState.AWAITING_SLOT
        assert session.slots == []

    @pytest.mark.parametrize("offset", [-1, 14, 30])
    def test_rejects_dates_outside_window(self, session, finder, now, offset: int) -> None:
        with pytest.raises(InvalidSelectionException):
            session.choose_date(WEDNESDAY + timedelta(days=offset), finder, now=now)
        assert session.state is SessionState.AWAITING_DATE

    def test_store_failure_is_unavailable(self, session, now) -> None:
        finder = Mock()
        finder.compute_available_slots.side_effect = RepositoryException("down")

        with pytest.raises(StoreUnavailableException):
            session.choose_date(WEDNESDAY, finder, now=now)
        assert session.state is SessionState.AWAITING_DATE


class TestChooseSlot:
    def test_confirms_reservation(self, session, finder, committer, now) -> None:
        session.choose_date(WEDNESDAY, finder, now=now)

        outcome = session.choose_slot(14, committer)

        assert outcome.confirmed
        assert session.state is SessionState.CONFIRMED
        assert session.reservation_id == outcome.reservation_id
        assert session.is_terminal

    def test_commits_the_re_derived_instant(self, session, finder, now, at) -> None:
        session.choose_date(WEDNESDAY, finder, now=now)
        committer = Mock()
        committer.commit.return_value = CommitOutcome(
            status=CommitStatus.CONFIRMED, starts_at=at(2026, 10, 21, 14), reservation_id="res-1"
        )

        session.choose_slot(14, committer)

        section_id, starts_at, user_id = committer.commit.call_args.args
        assert section_id == session.section.id
        assert starts_at == at(2026, 10, 21, 14)
        assert user_id == "user-1"

    def test_slot_before_date_rejected(self, session, committer) -> None:
        with pytest.raises(InvalidSelectionException):
            session.choose_slot(14, committer)
        assert session.state is SessionState.AWAITING_DATE

    @pytest.mark.parametrize("start_hour", [9, 17, 23, -1, True])
    def test_hour_not_on_offer_rejected(self, session, finder, committer, now, start_hour) -> None:
        session.choose_date(WEDNESDAY, finder, now=now)

        with pytest.raises(InvalidSelectionException):
            session.choose_slot(start_hour, committer)
        assert session.state is SessionState.AWAITING_SLOT

    def test_slot_from_previous_date_rejected(self, session, finder, committer, now) -> None:
        session.choose_date(THURSDAY, finder, now=now)
        session.choose_date(WEDNESDAY, finder, now=now)

        with pytest.raises(InvalidSelectionException):
            session.choose_slot(9, committer)

    def test_conflict_then_retry(self, session, finder, committer, now, at) -> None:
        session.choose_date(WEDNESDAY, finder, now=now)
        # Someone else takes 14:00 while this user is browsing
        committer.commit(session.section.id, at(2026, 10, 21, 14), "user-2")

        outcome = session.choose_slot(14, committer)

        assert outcome.status is CommitStatus.CONFLICT
        assert session.state is SessionState.CONFLICT
        assert session.slots == []
        assert session.reservation_id is None

        slots = session.choose_date(WEDNESDAY, finder, now=now)
        assert 14 not in [slot.start_hour for slot in slots]
        assert session.choose_slot(15, committer).confirmed
        assert session.state is SessionState.CONFIRMED

    def test_slot_after_conflict_requires_new_date(self, session, finder, committer, now, at) -> None:
        session.choose_date(WEDNESDAY, finder, now=now)
        committer.commit(session.section.id, at(2026, 10, 21, 14), "user-2")
        session.choose_slot(14, committer)

        with pytest.raises(InvalidSelectionException):
            session.choose_slot(15, committer)

    def test_store_failure_returns_to_awaiting_slot(self, session, finder, now) -> None:
        session.choose_date(WEDNESDAY, finder, now=now)
        committer = Mock()
        committer.commit.side_effect = StoreUnavailableException()

        with pytest.raises(StoreUnavailableException):
            session.choose_slot(14, committer)

        assert session.state is SessionState.AWAITING_SLOT
        assert 14 in session.offered_hours

    def test_confirmed_session_accepts_no_more_events(self, session, finder, committer, now) -> None:
        session.choose_date(WEDNESDAY, finder, now=now)
        session.choose_slot(14, committer)

        with pytest.raises(InvalidSelectionException):
            session.choose_date(THURSDAY, finder, now=now)
        with pytest.raises(InvalidSelectionException):
            session.choose_slot(15, committer)


class TestOwnershipAndExpiry:
    def test_only_owner_may_act(self, session) -> None:
        session.ensure_owner("user-1")
        with pytest.raises(SessionOwnershipException):
            session.ensure_owner("user-2")

    def test_expired_session_rejects_events(self, session, finder, committer, now) -> None:
        session.choose_date(WEDNESDAY, finder, now=now)
        session.expire()

        assert session.state is SessionState.EXPIRED
        assert session.slots == []
        with pytest.raises(SessionExpiredException):
            session.choose_date(WEDNESDAY, finder, now=now)
        with pytest.raises(SessionExpiredException):
            session.choose_slot(14, committer)
