from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest
from sqlalchemy.exc import IntegrityError

from roombook.core.exceptions import ReservationUniquenessViolation
from roombook.core.timezone_utils import ensure_utc
from roombook.models import Reservation
from roombook.models.reservation import RESERVATION_UNIQUE_CONSTRAINT
from roombook.repositories.factory import RepositoryFactory
from roombook.repositories.reservation_repository import is_reservation_uniqueness_violation


class _FakeDiag:
    def __init__(self, constraint_name: str) -> None:
        self.constraint_name = constraint_name


class _FakeOrig:
    def __init__(self, constraint_name: Optional[str], text: str = "") -> None:
        self.diag = _FakeDiag(constraint_name) if constraint_name else None
        self._text = text

    def __str__(self) -> str:
        return self._text


def _make_error(constraint: Optional[str], text: str = "") -> IntegrityError:
    return IntegrityError("stmt", params=None, orig=_FakeOrig(constraint, text=text))


class TestUniquenessViolationDetection:
    def test_by_constraint_name(self) -> None:
        assert is_reservation_uniqueness_violation(_make_error(RESERVATION_UNIQUE_CONSTRAINT))

    def test_other_constraint_name(self) -> None:
        assert not is_reservation_uniqueness_violation(_make_error("reservations_section_id_fkey"))

    def test_sqlite_text_fallback(self) -> None:
        error = _make_error(
            None, text="UNIQUE constraint failed: reservations.section_id, reservations.starts_at"
        )
        assert is_reservation_uniqueness_violation(error)

    def test_unrelated_text(self) -> None:
        assert not is_reservation_uniqueness_violation(_make_error(None, text="FOREIGN KEY failed"))


class TestReservationRepository:
    def test_create_and_find(self, db, catalog, at) -> None:
        repo = RepositoryFactory.create_reservation_repository(db)
        starts_at = at(2026, 10, 21, 12)

        with repo.transaction():
            created = repo.create_reservation(catalog["section"].id, starts_at, "user-1")

        found = repo.find_reservation(catalog["section"].id, starts_at)
        assert found is not None
        assert found.id == created.id
        assert found.booker == "user-1"
        assert found.users == {"user-1"}
        assert ensure_utc(found.starts_at) == datetime(2026, 10, 21, 16, tzinfo=timezone.utc)

    def test_find_reservation_matches_same_instant_in_any_zone(self, db, catalog, at) -> None:
        repo = RepositoryFactory.create_reservation_repository(db)
        with repo.transaction():
            repo.create_reservation(catalog["section"].id, at(2026, 10, 21, 12), "user-1")

        utc_instant = datetime(2026, 10, 21, 16, tzinfo=timezone.utc)
        assert repo.find_reservation(catalog["section"].id, utc_instant) is not None
        assert repo.find_reservation(catalog["other_section"].id, utc_instant) is None

    def test_duplicate_slot_rejected_by_store(self, db, catalog, at) -> None:
        repo = RepositoryFactory.create_reservation_repository(db)
        starts_at = at(2026, 10, 21, 12)
        with repo.transaction():
            repo.create_reservation(catalog["section"].id, starts_at, "user-1")

        with pytest.raises(ReservationUniquenessViolation):
            with repo.transaction():
                repo.create_reservation(catalog["section"].id, starts_at, "user-2")

        assert db.query(Reservation).count() == 1

    def test_same_hour_in_other_section_allowed(self, db, catalog, at) -> None:
        repo = RepositoryFactory.create_reservation_repository(db)
        starts_at = at(2026, 10, 21, 12)
        with repo.transaction():
            repo.create_reservation(catalog["section"].id, starts_at, "user-1")
            repo.create_reservation(catalog["other_section"].id, starts_at, "user-2")

        assert db.query(Reservation).count() == 2

    def test_find_reservations_half_open_window(self, db, catalog, at) -> None:
        repo = RepositoryFactory.create_reservation_repository(db)
        section_id = catalog["section"].id
        with repo.transaction():
            for hour in (9, 12, 16):
                repo.create_reservation(section_id, at(2026, 10, 21, hour), f"user-{hour}")
            repo.create_reservation(section_id, at(2026, 10, 22, 9), "user-next-day")

        day_start = at(2026, 10, 21, 12)
        day_end = at(2026, 10, 21, 16)
        found = repo.find_reservations(section_id, day_start, day_end)

        assert [r.booker for r in found] == ["user-12"]

        whole_day = repo.find_reservations(
            section_id, at(2026, 10, 21, 0), at(2026, 10, 21, 0) + timedelta(days=1)
        )
        assert [r.booker for r in whole_day] == ["user-9", "user-12", "user-16"]


class TestCatalogRepository:
    def test_lookup_by_name(self, db, catalog) -> None:
        repo = RepositoryFactory.create_catalog_repository(db)

        room = repo.find_room_by_name("Library")
        assert room is not None and room.id == catalog["room"].id
        section = repo.find_section_by_name(room.id, "Quiet Room A")
        assert section is not None and section.id == catalog["section"].id

    def test_section_names_scoped_to_room(self, db, catalog) -> None:
        repo = RepositoryFactory.create_catalog_repository(db)

        assert repo.find_section_by_name(catalog["room"].id, "Court 1") is None
        assert repo.find_room_by_name("library") is None

    def test_lookup_by_id_and_listing(self, db, catalog) -> None:
        repo = RepositoryFactory.create_catalog_repository(db)

        assert repo.get_room(catalog["closed_room"].id).closed is True
        assert repo.get_section(catalog["section"].id).capacity == 5
        assert [s.name for s in repo.list_sections(catalog["room"].id)] == [
            "Quiet Room A",
            "Study Hall",
        ]
