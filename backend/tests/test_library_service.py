from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

from config.lending_config import LendingPolicy
from constants import BusinessErrorCode
from exceptions import BusinessError, DataAccessError, ValidationError
from models import MediaItem
from services.library_service import LibraryService

LOAN_DAY = date(2026, 3, 1)


@pytest.fixture
def service(db_session):
    return LibraryService(db_session, policy=LendingPolicy())


class TestCatalogue:

    def test_add_media_item_normalizes_and_fills_copies(self, service):
        item = service.add_media_item(MediaItem(
            title="  Dune ", author="Frank Herbert", media_type="book", isbn="",
            total_copies=3, late_fees_per_day=Decimal('0.50'),
        ))

        stored = service.get_media_item(item.id)
        assert stored.title == "Dune"
        assert stored.media_type == "BOOK"
        assert stored.isbn is None
        assert stored.available_copies == 3

    def test_add_media_item_defaults(self, service):
        item = service.add_media_item(MediaItem(title="Blue Train", media_type="CD"))

        assert item.total_copies == 1
        assert item.available_copies == 1
        assert item.late_fees_per_day == Decimal('0.00')

    def test_add_none_is_a_validation_error(self, service):
        with pytest.raises(ValidationError):
            service.add_media_item(None)

    @pytest.mark.parametrize("fields", [
        {"title": "   ", "media_type": "BOOK"},
        {"title": "Dune", "media_type": ""},
        {"title": "Dune", "media_type": "BOOK", "total_copies": -1},
        {"title": "Dune", "media_type": "BOOK", "late_fees_per_day": Decimal('-0.10')},
    ])
    def test_malformed_items_are_rejected(self, service, fields):
        with pytest.raises(ValidationError) as exc_info:
            service.add_media_item(MediaItem(**fields))

        assert exc_info.value.details["invalid_fields"]
        assert service.search_media_items("Dune") == []

    def test_duplicate_isbn_is_a_data_access_error(self, service, make_item):
        make_item(isbn="978-0441013593")

        with pytest.raises(DataAccessError):
            service.add_media_item(MediaItem(title="Copy", media_type="BOOK", isbn="978-0441013593"))

    def test_update_media_item(self, service, book):
        book.title = "Java Programming, 2nd Edition"
        service.update_media_item(book)

        assert service.get_media_item(book.id).title == "Java Programming, 2nd Edition"

    def test_update_keeps_copies_out_on_loan(self, service, user, book):
        service.borrow_item(user.id, book.id, as_of=LOAN_DAY)

        service.update_media_item(MediaItem(
            id=book.id, title="Renamed", media_type="BOOK", total_copies=2,
            late_fees_per_day=Decimal('1.00'),
        ))

        stored = service.get_media_item(book.id)
        assert stored.title == "Renamed"
        assert stored.available_copies == 1

    def test_update_sets_copies_when_given(self, service, book):
        service.update_media_item(MediaItem(
            id=book.id, title="Java Programming", media_type="BOOK", total_copies=3, available_copies=3,
        ))

        stored = service.get_media_item(book.id)
        assert stored.total_copies == 3
        assert stored.available_copies == 3

    def test_update_unknown_item_raises(self, service):
        with pytest.raises(DataAccessError):
            service.update_media_item(MediaItem(id=4242, title="Ghost", media_type="BOOK"))

    def test_delete_is_idempotent(self, service, book):
        item_id = book.id

        assert service.delete_media_item(item_id) is True
        assert service.delete_media_item(item_id) is False
        assert service.get_media_item(item_id) is None

    def test_null_search_returns_empty(self, service, book):
        assert service.search_media_items(None) == []
        assert service.find_by_type(None) == []
        assert [i.id for i in service.search_media_items("java")] == [book.id]


class TestBorrowing:

    def test_borrow_book_uses_book_period(self, service, user, book):
        loan = service.borrow_item(user.id, book.id, as_of=LOAN_DAY)

        assert loan.status == "ACTIVE"
        assert loan.loan_date == LOAN_DAY
        assert loan.due_date == LOAN_DAY + timedelta(days=21)
        assert service.get_media_item(book.id).available_copies == 1

    def test_borrow_cd_uses_cd_period(self, service, user, make_item):
        cd = make_item(title="Kind of Blue", media_type="CD")

        loan = service.borrow_item(user.id, cd.id, as_of=LOAN_DAY)

        assert loan.due_date == LOAN_DAY + timedelta(days=7)

    @pytest.mark.parametrize("media_type", ["DVD", "MAGAZINE"])
    def test_unknown_media_type_uses_default_period(self, service, user, make_item, media_type):
        item = make_item(title="Odd One", media_type=media_type)

        loan = service.borrow_item(user.id, item.id, as_of=LOAN_DAY)

        assert loan.due_date == LOAN_DAY + timedelta(days=14)

    def test_borrow_accepts_datetime(self, service, user, book):
        loan = service.borrow_item(user.id, book.id, as_of=datetime(2026, 3, 1, 18, 45))

        assert loan.loan_date == LOAN_DAY

    def test_no_copies_available(self, service, user, make_item):
        item = make_item(total_copies=1, available_copies=0)

        with pytest.raises(BusinessError) as exc_info:
            service.borrow_item(user.id, item.id, as_of=LOAN_DAY)

        assert exc_info.value.code is BusinessErrorCode.NO_COPIES_AVAILABLE
        assert service.get_user_loans(user.id) == []

    def test_negative_copies_block_borrowing(self, service, user, make_item):
        item = make_item(total_copies=1, available_copies=-1)

        with pytest.raises(BusinessError) as exc_info:
            service.borrow_item(user.id, item.id)

        assert exc_info.value.code is BusinessErrorCode.NO_COPIES_AVAILABLE
        assert service.get_media_item(item.id).available_copies == -1

    def test_last_copy_goes_once(self, service, user, make_user, make_item):
        item = make_item(total_copies=1)
        service.borrow_item(user.id, item.id, as_of=LOAN_DAY)

        with pytest.raises(BusinessError):
            service.borrow_item(make_user().id, item.id, as_of=LOAN_DAY)

        assert service.get_media_item(item.id).available_copies == 0

    def test_unknown_user(self, service, book):
        with pytest.raises(BusinessError) as exc_info:
            service.borrow_item(9999, book.id)

        assert exc_info.value.code is BusinessErrorCode.USER_NOT_FOUND
        assert service.get_media_item(book.id).available_copies == 2

    def test_unknown_item(self, service, user):
        with pytest.raises(BusinessError) as exc_info:
            service.borrow_item(user.id, 9999)

        assert exc_info.value.code is BusinessErrorCode.ITEM_NOT_FOUND

    def test_user_and_overdue_loans(self, service, user, book, make_item):
        cd = make_item(title="Kind of Blue", media_type="CD")
        book_loan = service.borrow_item(user.id, book.id, as_of=LOAN_DAY)
        cd_loan = service.borrow_item(user.id, cd.id, as_of=LOAN_DAY)

        assert {loan.id for loan in service.get_user_loans(user.id)} == {book_loan.id, cd_loan.id}
        assert [loan.id for loan in service.get_overdue_loans(as_of=LOAN_DAY + timedelta(days=10))] == [cd_loan.id]
        assert service.get_overdue_loans(as_of=LOAN_DAY) == []


class TestReturning:

    def test_on_time_return(self, service, user, book):
        loan = service.borrow_item(user.id, book.id, as_of=LOAN_DAY)

        result = service.return_item(loan.id, as_of=LOAN_DAY + timedelta(days=21))

        assert result.loan.status == "RETURNED"
        assert result.loan.return_date == LOAN_DAY + timedelta(days=21)
        assert result.fine is None
        assert result.fine_amount == Decimal('0.00')
        assert result.promoted_loan is None
        assert service.get_media_item(book.id).available_copies == 2
        assert service.get_user_loans(user.id, active_only=True) == []

    def test_late_return_records_fine(self, service, user, book):
        loan = service.borrow_item(user.id, book.id, as_of=LOAN_DAY)

        result = service.return_item(loan.id, as_of=LOAN_DAY + timedelta(days=24))

        assert result.was_late
        assert result.fine_amount == Decimal('3.00')
        assert result.fine.paid is False
        assert service.get_outstanding_balance(user.id) == Decimal('3.00')
        assert [f.id for f in service.get_fines_for_user(user.id)] == [result.fine.id]

    def test_accrued_fine_for_open_loan(self, service, user, book):
        loan = service.borrow_item(user.id, book.id, as_of=LOAN_DAY)

        assert service.get_accrued_fine(loan.id, as_of=LOAN_DAY + timedelta(days=20)) == Decimal('0.00')
        assert service.get_accrued_fine(loan.id, as_of=LOAN_DAY + timedelta(days=26)) == Decimal('5.00')
        assert service.get_accrued_fine(9999) == Decimal('0.00')

    def test_unknown_loan(self, service):
        with pytest.raises(BusinessError) as exc_info:
            service.return_item(9999)

        assert exc_info.value.code is BusinessErrorCode.LOAN_NOT_FOUND

    def test_double_return_is_rejected(self, service, user, book):
        loan = service.borrow_item(user.id, book.id, as_of=LOAN_DAY)
        service.return_item(loan.id, as_of=LOAN_DAY + timedelta(days=1))

        with pytest.raises(BusinessError) as exc_info:
            service.return_item(loan.id, as_of=LOAN_DAY + timedelta(days=2))

        assert exc_info.value.code is BusinessErrorCode.LOAN_ALREADY_RETURNED
        assert service.get_media_item(book.id).available_copies == 2

    def test_return_for_missing_item_rolls_back(self, service, user, book, monkeypatch):
        loan = service.borrow_item(user.id, book.id, as_of=LOAN_DAY)
        loan_id = loan.id
        monkeypatch.setattr(service.item_repo, "find_by_id_for_update", lambda item_id: None)

        with pytest.raises(BusinessError) as exc_info:
            service.return_item(loan_id, as_of=LOAN_DAY + timedelta(days=30))

        assert exc_info.value.code is BusinessErrorCode.ITEM_NOT_FOUND
        assert service.loan_repo.find_by_id(loan_id).status == "ACTIVE"
        assert service.get_fines_for_user(user.id) == []


class TestFines:

    @pytest.fixture
    def fine(self, service, user, book):
        loan = service.borrow_item(user.id, book.id, as_of=LOAN_DAY)
        return service.return_item(loan.id, as_of=LOAN_DAY + timedelta(days=23)).fine

    def test_pay_fine(self, service, user, fine):
        paid = service.pay_fine(fine.id, when=datetime(2026, 4, 1, 12, 0))

        assert paid.paid is True
        assert paid.paid_at == datetime(2026, 4, 1, 12, 0)
        assert service.get_outstanding_balance(user.id) == Decimal('0.00')
        assert service.get_fines_for_user(user.id) == []
        assert len(service.get_fines_for_user(user.id, unpaid_only=False)) == 1

    def test_pay_twice(self, service, fine):
        service.pay_fine(fine.id)

        with pytest.raises(BusinessError) as exc_info:
            service.pay_fine(fine.id)

        assert exc_info.value.code is BusinessErrorCode.FINE_ALREADY_PAID

    def test_pay_unknown_fine(self, service):
        with pytest.raises(BusinessError) as exc_info:
            service.pay_fine(9999)

        assert exc_info.value.code is BusinessErrorCode.FINE_NOT_FOUND


class TestUsers:

    def test_delete_user_removes_their_loans(self, service, user, book):
        user_id = user.id
        service.borrow_item(user_id, book.id, as_of=LOAN_DAY)

        assert service.delete_user(user_id) is True
        assert service.delete_user(user_id) is False
        assert service.get_user_loans(user_id) == []
