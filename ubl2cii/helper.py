# File: ubl2cii/helper.py
"""Convenience entry points: read UBL, convert to CII, write XML.

• convert_invoice()      → CII from a UBL Invoice
• convert_credit_note()  → CII from a UBL CreditNote
• convert_auto_detect()  → CII from either, chosen by the root element
• write_cii()            → serialize a CII document to a path or stream

Sources can be a path, raw bytes or a binary file object.  Problems are
collected in the supplied :class:`~ubl2cii.errors.ErrorList`; the functions
return ``None`` instead of raising.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import IO, Union

from ubl2cii.convert import convert_document
from ubl2cii.errors import ErrorList
from ubl2cii.io import cii_writer
from ubl2cii.model import cii
from ubl2cii.model.ubl import DocumentVariant
from ubl2cii.parsing.ubl import parse_xml, read_document, screen_xml

log = logging.getLogger(__name__)

Source = Union[str, Path, bytes, IO[bytes]]


def _convert(
    source: Source, errors: ErrorList, variant: DocumentVariant
) -> cii.CrossIndustryInvoice | None:
    document = read_document(source, errors, variant)
    if document is None:
        return None
    return convert_document(document, errors)


def convert_invoice(source: Source, errors: ErrorList) -> cii.CrossIndustryInvoice | None:
    return _convert(source, errors, DocumentVariant.INVOICE)


def convert_credit_note(
    source: Source, errors: ErrorList
) -> cii.CrossIndustryInvoice | None:
    return _convert(source, errors, DocumentVariant.CREDIT_NOTE)


def convert_auto_detect(
    source: Source, errors: ErrorList
) -> cii.CrossIndustryInvoice | None:
    """Convert an Invoice or a CreditNote, whichever the root element names.

    Any other root yields exactly one error naming the qualified root
    element and ``None``.
    """
    screened = screen_xml(source, errors)
    if screened is None:
        return None
    data, root = screened

    tag = root.tag
    local_name = tag.rsplit("}", 1)[-1]
    try:
        variant = DocumentVariant(local_name)
    except ValueError:
        errors.add_error(f"The XML document type {tag} is not supported")
        return None

    log.debug("Detected UBL %s", variant.value)
    lxml_root = parse_xml(data, errors)
    if lxml_root is None:
        return None
    document = read_document(lxml_root, errors, variant)
    if document is None:
        return None
    return convert_document(document, errors)


def write_cii(
    document: cii.CrossIndustryInvoice,
    target: str | Path | IO[bytes],
    errors: ErrorList,
) -> bool:
    """Write ``document`` as CII XML; returns ``True`` on success."""
    try:
        cii_writer.write_cii(document, target)
    except OSError as exc:
        errors.add_error(f"Failed to write CII XML: {exc}", location=str(target))
        return False
    return True
