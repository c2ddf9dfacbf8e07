import pytest

from constants import BusinessErrorCode, MediaType
from domain.value_objects import LoanStatus, ReservationStatus
from exceptions import BusinessError


class TestReservationStatus:

    def test_only_active_is_not_terminal(self):
        assert not ReservationStatus.ACTIVE.is_terminal()
        for status in (ReservationStatus.FULFILLED, ReservationStatus.CANCELLED, ReservationStatus.EXPIRED):
            assert status.is_terminal()

    @pytest.mark.parametrize("target", [
        ReservationStatus.FULFILLED,
        ReservationStatus.CANCELLED,
        ReservationStatus.EXPIRED,
    ])
    def test_active_can_reach_every_outcome(self, target):
        assert ReservationStatus.ACTIVE.can_transition_to(target)

    @pytest.mark.parametrize("source", [
        ReservationStatus.FULFILLED,
        ReservationStatus.CANCELLED,
        ReservationStatus.EXPIRED,
    ])
    def test_terminal_states_go_nowhere(self, source):
        for target in ReservationStatus:
            assert not source.can_transition_to(target)

    def test_from_string_rejects_unknown(self):
        assert ReservationStatus.from_string("EXPIRED") is ReservationStatus.EXPIRED
        with pytest.raises(ValueError):
            ReservationStatus.from_string("PENDING")


class TestLoanStatus:

    def test_active_to_returned_only(self):
        assert LoanStatus.ACTIVE.can_transition_to(LoanStatus.RETURNED)
        assert not LoanStatus.RETURNED.can_transition_to(LoanStatus.RETURNED)
        assert not LoanStatus.RETURNED.can_transition_to(LoanStatus.ACTIVE)
        assert LoanStatus.RETURNED.is_terminal()


class TestMediaType:

    def test_tags_are_case_insensitive(self):
        assert MediaType.from_tag("book") is MediaType.BOOK
        assert MediaType.from_tag(" CD ") is MediaType.CD

    def test_unknown_tags_have_no_policy(self):
        assert MediaType.from_tag("DVD") is None
        assert MediaType.from_tag("") is None
        assert MediaType.from_tag(None) is None


class TestBusinessError:

    def test_default_message_and_code(self):
        error = BusinessError(BusinessErrorCode.NO_COPIES_AVAILABLE, item_id=7)

        assert error.code is BusinessErrorCode.NO_COPIES_AVAILABLE
        assert error.message == "No copies available"
        assert error.details == {"code": "NO_COPIES_AVAILABLE", "item_id": 7}
