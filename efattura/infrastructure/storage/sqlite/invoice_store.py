"""
SQLite implementation of invoice storage.

Header fields and totals live in plain columns; parties, line items,
installments and the intermediary are stored as JSON documents so an
``Invoice`` round-trips without loss.
"""

import json
from datetime import datetime, timezone

import aiosqlite

from efattura.config import get_logger
from efattura.core.entities import (
    Intermediary,
    Invoice,
    InvoiceStatus,
    LineItem,
    Party,
    PaymentInstallment,
)
from efattura.core.exceptions import DatabaseError, InvoiceNotFoundError
from efattura.core.interfaces import IInvoiceStore
from efattura.infrastructure.storage.sqlite.connection import get_connection, get_transaction

logger = get_logger(__name__)

_HEADER_COLUMNS = (
    "number",
    "date",
    "document_type",
    "currency",
    "tax_regime_article",
    "reason_text",
    "recipient_code",
    "recipient_pec",
    "total",
    "taxable_amount",
    "tax_amount",
    "vat_rate",
    "vat_collection_mode",
    "payment_terms",
    "issuer_role",
)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class SQLiteInvoiceStore(IInvoiceStore):
    """SQLite implementation of invoice storage."""

    async def store(self, invoice: Invoice) -> int:
        """Insert a new invoice; any ``id`` on the record is ignored."""
        columns = (
            "status",
            "note",
            "approver",
            *_HEADER_COLUMNS,
            "seller_json",
            "buyer_json",
            "line_items_json",
            "payment_installments_json",
            "intermediary_json",
            "created_at",
            "updated_at",
        )
        now = _now()
        values = (
            invoice.status.value,
            invoice.note,
            invoice.approver,
            *(getattr(invoice, c) for c in _HEADER_COLUMNS),
            invoice.seller.model_dump_json(),
            invoice.buyer.model_dump_json(),
            json.dumps([item.model_dump() for item in invoice.line_items]),
            json.dumps([inst.model_dump() for inst in invoice.payment_installments]),
            invoice.intermediary.model_dump_json() if invoice.intermediary else None,
            now,
            now,
        )
        placeholders = ", ".join("?" for _ in columns)

        try:
            async with get_transaction() as conn:
                cursor = await conn.execute(
                    f"INSERT INTO invoices ({', '.join(columns)}) VALUES ({placeholders})",
                    values,
                )
                invoice_id = cursor.lastrowid
        except aiosqlite.Error as e:
            raise DatabaseError("store_invoice", str(e)) from e

        logger.info(
            "invoice_stored",
            invoice_id=invoice_id,
            number=invoice.number,
            lines=len(invoice.line_items),
        )
        return invoice_id

    async def get_invoice(self, invoice_id: int) -> Invoice | None:
        """Get invoice by ID."""
        async with get_connection() as conn:
            cursor = await conn.execute("SELECT * FROM invoices WHERE id = ?", (invoice_id,))
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_invoice(row)

    async def list_invoices(
        self,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Invoice]:
        """List invoices with pagination, newest first."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM invoices
                ORDER BY created_at DESC, id DESC
                LIMIT ? OFFSET ?
                """,
                (limit, offset),
            )
            rows = await cursor.fetchall()
            return [self._row_to_invoice(row) for row in rows]

    async def list_by_status(self, status: InvoiceStatus) -> list[Invoice]:
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM invoices
                WHERE status = ?
                ORDER BY created_at DESC, id DESC
                """,
                (status.value,),
            )
            rows = await cursor.fetchall()
            return [self._row_to_invoice(row) for row in rows]

    async def update_status(
        self,
        invoice_id: int,
        status: InvoiceStatus,
        note: str | None = None,
        approver: str | None = None,
    ) -> Invoice:
        """
        Move an invoice to *status*.

        ``note`` and ``approver`` overwrite the stored values only when
        given.

        Raises:
            InvoiceNotFoundError: If no invoice has this ID.
        """
        try:
            async with get_transaction() as conn:
                cursor = await conn.execute(
                    """
                    UPDATE invoices SET
                        status = ?,
                        note = COALESCE(?, note),
                        approver = COALESCE(?, approver),
                        updated_at = ?
                    WHERE id = ?
                    """,
                    (status.value, note, approver, _now(), invoice_id),
                )
                updated = cursor.rowcount
        except aiosqlite.Error as e:
            raise DatabaseError("update_status", str(e)) from e

        if updated == 0:
            raise InvoiceNotFoundError(invoice_id)

        logger.info("invoice_status_updated", invoice_id=invoice_id, status=status.value)
        invoice = await self.get_invoice(invoice_id)
        if invoice is None:
            raise InvoiceNotFoundError(invoice_id)
        return invoice

    def _row_to_invoice(self, row: aiosqlite.Row) -> Invoice:
        """Convert database row to Invoice entity."""
        intermediary = None
        if row["intermediary_json"]:
            intermediary = Intermediary.model_validate_json(row["intermediary_json"])

        return Invoice(
            id=row["id"],
            status=InvoiceStatus(row["status"]),
            note=row["note"],
            approver=row["approver"],
            **{c: row[c] for c in _HEADER_COLUMNS},
            seller=Party.model_validate_json(row["seller_json"]),
            buyer=Party.model_validate_json(row["buyer_json"]),
            line_items=tuple(
                LineItem(**item) for item in json.loads(row["line_items_json"])
            ),
            payment_installments=tuple(
                PaymentInstallment(**inst)
                for inst in json.loads(row["payment_installments_json"])
            ),
            intermediary=intermediary,
        )
