"""
Ingest Invoice Use Case.

Parses a FatturaPA document, normalizes it and stores the record for
approval.
"""

from dataclasses import dataclass

from efattura.application.services import get_invoice_normalizer, get_store
from efattura.config import get_logger
from efattura.core.entities import Invoice
from efattura.core.interfaces import IInvoiceStore
from efattura.core.services import InvoiceNormalizer
from efattura.infrastructure.xml import parse_xml_tree

logger = get_logger(__name__)


@dataclass
class IngestResult:
    """Stored invoice and its identifier."""

    invoice_id: int
    invoice: Invoice


class IngestInvoiceUseCase:
    """
    Use case for ingesting FatturaPA documents.

    Flow:
    1. Parse the raw XML into a tree
    2. Normalize the tree into an Invoice
    3. Store it with status pending
    """

    def __init__(
        self,
        normalizer: InvoiceNormalizer | None = None,
        invoice_store: IInvoiceStore | None = None,
    ):
        self._normalizer = normalizer
        self._invoice_store = invoice_store

    def _get_normalizer(self) -> InvoiceNormalizer:
        if self._normalizer is None:
            self._normalizer = get_invoice_normalizer()
        return self._normalizer

    async def _get_store(self) -> IInvoiceStore:
        if self._invoice_store is None:
            self._invoice_store = await get_store()
        return self._invoice_store

    def parse(self, raw_xml: bytes | str, source: str | None = None) -> Invoice:
        """
        Parse and normalize without storing.

        Raises:
            XmlParseError: If the XML is malformed.
            ExtractionError: If root, header or body is missing.
        """
        tree = parse_xml_tree(raw_xml, source=source)
        return self._get_normalizer().normalize(tree)

    async def execute(self, raw_xml: bytes | str, source: str | None = None) -> IngestResult:
        logger.info("ingest_invoice_started", source=source)
        invoice = self.parse(raw_xml, source=source)

        store = await self._get_store()
        invoice_id = await store.store(invoice)
        invoice = invoice.with_id(invoice_id)

        logger.info(
            "ingest_invoice_complete",
            invoice_id=invoice_id,
            number=invoice.number,
            seller=invoice.seller.name,
        )
        return IngestResult(invoice_id=invoice_id, invoice=invoice)
