from __future__ import annotations

import logging

from ubl2cii.errors import ErrorList
from ubl2cii.model import cii, ubl
from .header import (
    build_document_context,
    build_exchanged_document,
    build_trade_transaction,
)
from .lines import count_lines

log = logging.getLogger(__name__)


def convert_document(
    document: ubl.SourceDocument | None, errors: ErrorList
) -> cii.CrossIndustryInvoice | None:
    """Convert a parsed UBL invoice or credit note to a CII invoice.

    The only rejected input is a missing document: one error is added to
    ``errors`` and ``None`` is returned.  Missing optional data never fails
    the conversion, it simply leaves the matching CII fields empty.
    """
    if document is None:
        errors.add_error("No UBL document to convert")
        return None

    log.debug(
        "Converting UBL %s %s with %d line(s)",
        document.variant.value,
        document.id,
        count_lines(document.lines),
    )
    return cii.CrossIndustryInvoice(
        context=build_document_context(document),
        document=build_exchanged_document(document),
        transaction=build_trade_transaction(document),
    )
