from app.core.config import settings


def next_invoice_number(
    existing_invoice_count: int,
    current_year: int,
    *,
    prefix: str | None = None,
    width: int | None = None,
) -> str:
    """
    ``INV-{year}-{count + 1}`` with the sequence zero-padded (``INV-2025-0004``).

    Derived only from the number of invoices the user can currently see, so two
    commits racing each other can compute the same number; the store's unique
    constraint on (user, number) turns that into a rejected write.
    """
    if existing_invoice_count < 0:
        raise ValueError("existing_invoice_count cannot be negative")
    prefix = prefix or settings.invoice_number_prefix
    width = width or settings.invoice_number_width
    sequence = str(existing_invoice_count + 1).zfill(width)
    return f"{prefix}-{current_year}-{sequence}"
