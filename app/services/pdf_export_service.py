from __future__ import annotations

from app.services.invoice_document import InvoiceDocument, document_lines

LINES_PER_PAGE = 50
PAGE_WIDTH = 595  # A4 in points
PAGE_HEIGHT = 842


def _escape_pdf_text(value: str) -> str:
    escaped = value.replace("\\", "\\\\")
    escaped = escaped.replace("(", "\\(")
    escaped = escaped.replace(")", "\\)")
    return escaped


def _page_stream(lines: list[str], *, page_number: int, page_count: int) -> bytes:
    commands = ["BT", "/F1 11 Tf", f"50 {PAGE_HEIGHT - 60} Td"]
    for index, line in enumerate(lines):
        if index:
            commands.append("0 -14 Td")
        commands.append(f"({_escape_pdf_text(line)}) Tj")
    commands.append("ET")
    if page_count > 1:
        commands += [
            "BT",
            "/F1 9 Tf",
            f"{PAGE_WIDTH - 110} 30 Td",
            f"(Page {page_number} of {page_count}) Tj",
            "ET",
        ]
    # Type1 Helvetica only covers latin-1.
    return "\n".join(commands).encode("latin-1", errors="replace")


def build_invoice_pdf(document: InvoiceDocument) -> bytes:
    lines = document_lines(document)
    pages = [lines[start : start + LINES_PER_PAGE] for start in range(0, len(lines), LINES_PER_PAGE)] or [[]]

    # Object numbering: 1 catalog, 2 page tree, 3 font, then a (page, contents) pair per page.
    page_ids = [4 + 2 * index for index in range(len(pages))]
    kids = " ".join(f"{page_id} 0 R" for page_id in page_ids)
    objects: list[bytes] = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        f"<< /Type /Pages /Kids [{kids}] /Count {len(pages)} >>".encode("ascii"),
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica /Encoding /WinAnsiEncoding >>",
    ]
    for number, (page_id, page_lines) in enumerate(zip(page_ids, pages), start=1):
        stream = _page_stream(page_lines, page_number=number, page_count=len(pages))
        objects.append(
            (
                f"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 {PAGE_WIDTH} {PAGE_HEIGHT}] "
                f"/Resources << /Font << /F1 3 0 R >> >> /Contents {page_id + 1} 0 R >>"
            ).encode("ascii")
        )
        objects.append(b"<< /Length %d >>\nstream\n%s\nendstream" % (len(stream), stream))

    title = _escape_pdf_text(document.invoice_number).encode("latin-1", errors="replace")
    objects.append(b"<< /Title (%s) /Producer (Invoice Desk) >>" % title)
    info_id = len(objects)

    pdf = b"%PDF-1.4\n%\xe2\xe3\xcf\xd3\n"
    offsets: list[int] = []
    for index, obj in enumerate(objects, start=1):
        offsets.append(len(pdf))
        pdf += f"{index} 0 obj\n".encode("ascii")
        pdf += obj + b"\nendobj\n"

    xref_offset = len(pdf)
    pdf += f"xref\n0 {len(objects) + 1}\n".encode("ascii")
    pdf += b"0000000000 65535 f \n"
    for offset in offsets:
        pdf += f"{offset:010d} 00000 n \n".encode("ascii")
    pdf += (
        f"trailer\n<< /Size {len(objects) + 1} /Root 1 0 R /Info {info_id} 0 R >>\n"
        f"startxref\n{xref_offset}\n%%EOF"
    ).encode("ascii")
    return pdf
