"""Tests for UpdateInvoiceStatusUseCase and ListInvoicesUseCase."""

from unittest.mock import AsyncMock

import pytest

from efattura.application.use_cases import (
    ListInvoicesUseCase,
    UpdateInvoiceStatusUseCase,
    parse_status,
)
from efattura.core.entities import Invoice, InvoiceStatus
from efattura.core.exceptions import InvalidStatusError
from efattura.core.interfaces import IInvoiceStore


@pytest.fixture
def mock_invoice_store() -> AsyncMock:
    store = AsyncMock(spec=IInvoiceStore)
    store.update_status.return_value = Invoice(id=1, status=InvoiceStatus.APPROVED)
    store.list_invoices.return_value = [Invoice(id=2), Invoice(id=1)]
    store.list_by_status.return_value = [Invoice(id=1, status=InvoiceStatus.APPROVED)]
    return store


class TestParseStatus:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("approved", InvoiceStatus.APPROVED),
            (" Rejected ", InvoiceStatus.REJECTED),
            (InvoiceStatus.PENDING, InvoiceStatus.PENDING),
        ],
    )
    def test_valid(self, value, expected):
        assert parse_status(value) == expected

    def test_invalid(self):
        with pytest.raises(InvalidStatusError) as exc:
            parse_status("archived")
        assert exc.value.details["allowed"] == ["pending", "approved", "rejected"]


class TestUpdateInvoiceStatusUseCase:
    """Tests for UpdateInvoiceStatusUseCase."""

    async def test_execute_passes_through(self, mock_invoice_store):
        use_case = UpdateInvoiceStatusUseCase(invoice_store=mock_invoice_store)
        result = await use_case.execute(1, "approved", note="ok", approver="anna")

        assert result.status == InvoiceStatus.APPROVED
        mock_invoice_store.update_status.assert_awaited_once_with(
            1, InvoiceStatus.APPROVED, note="ok", approver="anna"
        )

    async def test_invalid_status_never_reaches_store(self, mock_invoice_store):
        use_case = UpdateInvoiceStatusUseCase(invoice_store=mock_invoice_store)
        with pytest.raises(InvalidStatusError):
            await use_case.execute(1, "archived")
        mock_invoice_store.update_status.assert_not_called()


class TestListInvoicesUseCase:
    """Tests for ListInvoicesUseCase."""

    async def test_all(self, mock_invoice_store):
        result = await ListInvoicesUseCase(invoice_store=mock_invoice_store).execute()
        assert [i.id for i in result] == [2, 1]
        mock_invoice_store.list_invoices.assert_awaited_once_with(limit=100, offset=0)

    async def test_by_status(self, mock_invoice_store):
        use_case = ListInvoicesUseCase(invoice_store=mock_invoice_store)
        await use_case.execute(status="approved")
        mock_invoice_store.list_by_status.assert_awaited_once_with(InvoiceStatus.APPROVED)
