"""
Command-line interface for efattura.

Commands:
  efattura render invoice.xml -o invoice.pdf     # no database involved
  efattura ingest invoice.xml                    # store for approval
  efattura list [--status pending]
  efattura pdf 12 -o fattura-12.pdf
  efattura status 12 approved --note "ok" --approver "m.rossi"
"""

import argparse
import asyncio
import sys
from pathlib import Path

from efattura.application import (
    GenerateInvoicePdfUseCase,
    IngestInvoiceUseCase,
    ListInvoicesUseCase,
    UpdateInvoiceStatusUseCase,
)
from efattura.config import configure_logging, document_context, get_logger
from efattura.core.entities import Invoice
from efattura.core.exceptions import EFatturaError
from efattura.infrastructure.storage import close_pool

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="efattura",
        description="Normalize FatturaPA invoices and print courtesy copies",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log debug events to stderr"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    render = sub.add_parser("render", help="Render an XML invoice straight to PDF")
    render.add_argument("xml", type=Path, help="FatturaPA XML file")
    render.add_argument("-o", "--output", type=Path, required=True, help="PDF file to write")

    ingest = sub.add_parser("ingest", help="Parse and store an XML invoice")
    ingest.add_argument("xml", type=Path, help="FatturaPA XML file")

    list_cmd = sub.add_parser("list", help="List stored invoices, newest first")
    list_cmd.add_argument(
        "--status",
        help="Only invoices in this status (pending, approved, rejected)",
    )

    pdf = sub.add_parser("pdf", help="Render a stored invoice to PDF")
    pdf.add_argument("invoice_id", type=int, help="Stored invoice ID")
    pdf.add_argument("-o", "--output", type=Path, help="PDF file (default: generated name)")

    status = sub.add_parser("status", help="Approve or reject a stored invoice")
    status.add_argument("invoice_id", type=int, help="Stored invoice ID")
    status.add_argument("status", help="pending, approved or rejected")
    status.add_argument("--note", help="Reviewer note")
    status.add_argument("--approver", help="Reviewer name")

    return parser


def _summary(invoice: Invoice) -> str:
    return (
        f"{invoice.id or '-':>5}  {invoice.status.value:<9} {invoice.date:<10}  "
        f"{invoice.number:<15} {invoice.seller.name[:30]:<30}  {invoice.total}"
    )


async def _render(args: argparse.Namespace) -> None:
    with document_context(args.xml.name):
        invoice = IngestInvoiceUseCase().parse(args.xml.read_bytes(), source=args.xml.name)
    pdf_bytes = await GenerateInvoicePdfUseCase().render(invoice)
    args.output.write_bytes(pdf_bytes)
    print(f"Wrote {args.output} ({len(pdf_bytes)} bytes)")


async def _ingest(args: argparse.Namespace) -> None:
    with document_context(args.xml.name):
        result = await IngestInvoiceUseCase().execute(
            args.xml.read_bytes(), source=args.xml.name
        )
    print(f"Stored invoice {result.invoice_id}: {result.invoice.number} ({result.invoice.total})")


async def _list(args: argparse.Namespace) -> None:
    invoices = await ListInvoicesUseCase().execute(status=args.status)
    if not invoices:
        print("No invoices.")
        return
    for invoice in invoices:
        print(_summary(invoice))


async def _pdf(args: argparse.Namespace) -> None:
    result = await GenerateInvoicePdfUseCase().execute(args.invoice_id)
    output = args.output or Path(result.file_name)
    output.write_bytes(result.pdf_bytes)
    print(f"Wrote {output} ({result.file_size} bytes)")


async def _status(args: argparse.Namespace) -> None:
    invoice = await UpdateInvoiceStatusUseCase().execute(
        args.invoice_id, args.status, note=args.note, approver=args.approver
    )
    print(_summary(invoice))


COMMANDS = {
    "render": _render,
    "ingest": _ingest,
    "list": _list,
    "pdf": _pdf,
    "status": _status,
}


async def run(args: argparse.Namespace) -> int:
    try:
        await COMMANDS[args.command](args)
        return 0
    except EFatturaError as e:
        logger.error("command_failed", command=args.command, code=e.code, error=e.message)
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        await close_pool()


def main(argv: list[str] | None = None) -> int:
    """Entry point for the ``efattura`` command."""
    args = build_parser().parse_args(argv)
    configure_logging("DEBUG" if args.verbose else None)
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
