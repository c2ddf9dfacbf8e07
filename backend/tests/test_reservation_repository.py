from datetime import datetime, timedelta

import pytest

from models import Loan, Reservation
from repositories import MediaItemRepository, ReservationRepository, UserRepository

RESERVED_AT = datetime(2026, 5, 1, 9, 30)


@pytest.fixture
def repo(db_session):
    return ReservationRepository(db_session)


def _reservation(user, item, reserved_at=RESERVED_AT, status="ACTIVE"):
    return Reservation(
        user_id=user.id,
        item_id=item.id,
        reservation_date=reserved_at,
        expiry_date=reserved_at + timedelta(hours=48),
        status=status,
    )


class TestReservationQueue:

    def test_identical_timestamps_keep_insertion_order(self, repo, make_user, book, db_session):
        users = [make_user() for _ in range(3)]
        saved = [repo.save(_reservation(u, book)) for u in users]
        db_session.commit()

        queue = repo.find_active_by_item_id(book.id)

        assert [r.id for r in queue] == [r.id for r in saved]
        assert repo.find_queue_head(book.id).id == saved[0].id

    def test_earlier_reservation_date_wins(self, repo, make_user, book, db_session):
        late = repo.save(_reservation(make_user(), book, RESERVED_AT + timedelta(minutes=5)))
        early = repo.save(_reservation(make_user(), book, RESERVED_AT))
        db_session.commit()

        assert [r.id for r in repo.find_active_by_item_id(book.id)] == [early.id, late.id]

    def test_queue_order_is_monotonic(self, repo, make_user, book, db_session):
        first = repo.save(_reservation(make_user(), book))
        second = repo.save(_reservation(make_user(), book))
        db_session.commit()

        assert second.queue_order > first.queue_order

    def test_duplicate_queue_order_falls_back_to_id(self, repo, make_user, book, db_session):
        # Two sessions reading the same max before either commits store equal queue_order values
        first = _reservation(make_user(), book)
        first.queue_order = 7
        second = _reservation(make_user(), book)
        second.queue_order = 7
        repo.save(first)
        repo.save(second)
        db_session.commit()

        assert first.queue_order == second.queue_order
        assert [r.id for r in repo.find_active_by_item_id(book.id)] == [first.id, second.id]
        assert repo.find_queue_head(book.id).id == first.id
        assert [r.id for r in repo.find_expired_reservations(RESERVED_AT + timedelta(days=3))] == [first.id, second.id]

    def test_terminal_reservations_leave_the_queue(self, repo, user, book, db_session):
        repo.save(_reservation(user, book, status="CANCELLED"))
        repo.save(_reservation(user, book, status="FULFILLED"))
        active = repo.save(_reservation(user, book))
        db_session.commit()

        assert [r.id for r in repo.find_active_by_item_id(book.id)] == [active.id]
        assert repo.count_active_by_item_id(book.id) == 1
        assert len(repo.find_by_user_id(user.id)) == 3
        assert [r.id for r in repo.find_active_by_user_id(user.id)] == [active.id]

    def test_empty_queue(self, repo, book):
        assert repo.find_active_by_item_id(book.id) == []
        assert repo.find_queue_head(book.id) is None
        assert repo.count_active_by_item_id(book.id) == 0
        assert repo.find_active_by_item_id(None) == []

    def test_find_expired_reservations(self, repo, make_user, book, db_session):
        stale = repo.save(_reservation(make_user(), book, RESERVED_AT))
        repo.save(_reservation(make_user(), book, RESERVED_AT + timedelta(days=2)))
        repo.save(_reservation(make_user(), book, RESERVED_AT - timedelta(days=5), status="CANCELLED"))
        db_session.commit()

        expired = repo.find_expired_reservations(RESERVED_AT + timedelta(hours=49))

        assert [r.id for r in expired] == [stale.id]


class TestCascadingDeletes:

    def test_deleting_user_removes_loans_and_reservations(self, repo, user, make_user, book, db_session):
        other = make_user()
        repo.save(_reservation(user, book))
        repo.save(_reservation(other, book))
        db_session.add(Loan(user_id=user.id, item_id=book.id, loan_date=RESERVED_AT.date(),
                            due_date=RESERVED_AT.date() + timedelta(days=21), status="ACTIVE"))
        db_session.commit()

        assert UserRepository(db_session).delete_by_id(user.id) is True
        db_session.commit()

        remaining = db_session.query(Reservation).all()
        assert [r.user_id for r in remaining] == [other.id]
        assert db_session.query(Loan).count() == 0

    def test_deleting_item_removes_its_reservations(self, repo, user, book, make_item, db_session):
        other_item = make_item(title="Other")
        repo.save(_reservation(user, book))
        repo.save(_reservation(user, other_item))
        db_session.commit()
        book_id = book.id

        assert MediaItemRepository(db_session).delete_by_id(book_id) is True
        db_session.commit()

        assert repo.count_active_by_item_id(book_id) == 0
        assert [r.item_id for r in db_session.query(Reservation).all()] == [other_item.id]
