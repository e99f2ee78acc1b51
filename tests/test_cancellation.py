"""
Tests for customer cancellation rules and status display metadata.
"""

import pytest

from lifecycle_engine.domain.cancellation import CancellationPolicy
from lifecycle_engine.domain.models import OrderStatus, require_exhaustive
from lifecycle_engine.domain.status_display import STATUS_DISPLAY, status_display
from lifecycle_engine.domain.transitions import OrderStatusMachine

S = OrderStatus


class TestCancellationPolicy:
    """Tests for CancellationPolicy."""

    @pytest.mark.parametrize("status", list(OrderStatus))
    def test_customer_can_cancel(self, status):
        expected = status in (S.PENDING, S.ACCEPTED)

        assert CancellationPolicy().customer_can_cancel(status) is expected

    def test_stricter_than_operator(self):
        """Operators can still cancel where customers no longer can."""
        status = S.PREPARING

        assert not CancellationPolicy().customer_can_cancel(status)
        assert OrderStatusMachine().attempt_transition(status, S.CANCELED).ok

    @pytest.mark.parametrize("status", [S.PREPARING, S.READY, S.OUT_FOR_DELIVERY])
    def test_warning_explains_why_not(self, status):
        warning = CancellationPolicy().cancellation_warning(status)

        assert warning is not None
        assert "can no longer be canceled" in warning

    @pytest.mark.parametrize("status", [S.PENDING, S.ACCEPTED])
    def test_warning_for_cancelable_statuses(self, status):
        assert "cancel" in CancellationPolicy().cancellation_warning(status)

    @pytest.mark.parametrize("status", [S.COMPLETED, S.CANCELED])
    def test_no_warning_for_terminal_statuses(self, status):
        assert CancellationPolicy().cancellation_warning(status) is None

    def test_custom_warnings_must_cover_every_status(self):
        with pytest.raises(RuntimeError, match="missing entries"):
            CancellationPolicy(warnings={S.PENDING: "Pode cancelar"})


class TestStatusDisplay:
    """Tests for status display metadata."""

    def test_every_status_has_display(self):
        assert set(STATUS_DISPLAY) == set(OrderStatus)

    def test_status_display(self):
        display = status_display(S.OUT_FOR_DELIVERY)

        assert display.label == "Out for delivery"
        assert display.color == "cyan"

    def test_require_exhaustive_reports_missing(self):
        with pytest.raises(RuntimeError, match="completed"):
            require_exhaustive({status: 1 for status in OrderStatus if status != S.COMPLETED}, "table")
