from __future__ import annotations

import logging
from dataclasses import replace

from ubl2cii.constants import (
    FALLBACK_DOCUMENT_REFERENCE_TYPE_CODE,
    VALID_DOCUMENT_REFERENCE_TYPE_CODES,
)
from ubl2cii.model import cii, ubl
from .aggregate import redistribute_parent_allowances
from .lines import convert_lines
from .party import convert_party
from .primitives import (
    convert_allowance_charge,
    convert_amount,
    convert_applicable_trade_tax,
    convert_date,
    convert_id,
    convert_address,
    convert_text,
    text_or_none,
)

log = logging.getLogger(__name__)


def document_reference_type_code(type_code: str | None) -> str:
    """``50`` and ``130`` are kept, everything else becomes ``916``."""
    if type_code in VALID_DOCUMENT_REFERENCE_TYPE_CODES:
        return type_code
    return FALLBACK_DOCUMENT_REFERENCE_TYPE_CODE


def convert_additional_reference(
    reference: ubl.DocumentReference,
) -> cii.ReferencedDocument:
    attachments: tuple[cii.BinaryObject, ...] = ()
    if reference.embedded_object is not None:
        obj = reference.embedded_object
        attachments = (
            cii.BinaryObject(
                value=obj.value,
                mime_code=text_or_none(obj.mime_code),
                filename=text_or_none(obj.filename),
            ),
        )

    return cii.ReferencedDocument(
        issuer_assigned_id=text_or_none(reference.id),
        uri_id=text_or_none(reference.external_uri),
        type_code=document_reference_type_code(reference.type_code),
        names=tuple(convert_text(d) for d in reference.descriptions),
        attachments=attachments,
        formatted_issue_date=convert_date(reference.issue_date),
    )


def build_document_context(document: ubl.SourceDocument) -> cii.DocumentContext:
    return cii.DocumentContext(
        guideline_id=document.customization_id,
        business_process_id=document.profile_id,
    )


def build_exchanged_document(document: ubl.SourceDocument) -> cii.ExchangedDocument:
    return cii.ExchangedDocument(
        id=text_or_none(document.id),
        type_code=text_or_none(document.type_code),
        issue_date=convert_date(document.issue_date),
        notes=document.notes,
    )


def build_trade_agreement(document: ubl.SourceDocument) -> cii.HeaderTradeAgreement:
    buyer_order_reference = None
    if document.order_reference_id is not None:
        buyer_order_reference = cii.ReferencedDocument(
            issuer_assigned_id=document.order_reference_id
        )

    contract_reference = None
    if document.contract_reference_id is not None:
        contract_reference = cii.ReferencedDocument(
            issuer_assigned_id=document.contract_reference_id
        )

    return cii.HeaderTradeAgreement(
        buyer_reference=document.buyer_reference,
        seller=convert_party(document.seller),
        buyer=convert_party(document.buyer),
        buyer_order_reference=buyer_order_reference,
        contract_reference=contract_reference,
        additional_references=tuple(
            convert_additional_reference(r) for r in document.additional_references
        ),
    )


def build_trade_delivery(delivery: ubl.Delivery | None) -> cii.HeaderTradeDelivery:
    """The delivery section is mandatory in CII and may stay empty."""
    if delivery is None:
        return cii.HeaderTradeDelivery()

    ship_to = None
    if delivery.location is not None:
        location_id = convert_id(delivery.location.id)
        ship_to = cii.TradeParty(
            ids=(location_id,) if location_id is not None else (),
            postal_address=convert_address(delivery.location.address),
        )

    return cii.HeaderTradeDelivery(
        ship_to=ship_to,
        actual_delivery_date=convert_date(delivery.actual_delivery_date),
    )


def build_monetary_summation(
    monetary_total: ubl.MonetaryTotal | None, tax_total: ubl.TaxTotal | None
) -> cii.MonetarySummation:
    """Header monetary summation before any parent-line redistribution."""
    summation = cii.MonetarySummation()
    if monetary_total is not None:
        summation = replace(
            summation,
            line_total=convert_amount(monetary_total.line_extension_amount),
            charge_total=convert_amount(monetary_total.charge_total_amount),
            allowance_total=convert_amount(monetary_total.allowance_total_amount),
            tax_basis_total=convert_amount(monetary_total.tax_exclusive_amount),
            rounding=convert_amount(monetary_total.payable_rounding_amount),
            grand_total=convert_amount(monetary_total.tax_inclusive_amount),
            prepaid_total=convert_amount(monetary_total.prepaid_amount),
            due_payable=convert_amount(monetary_total.payable_amount),
        )
    if tax_total is not None:
        # CII requires the currency on the tax total
        summation = replace(
            summation, tax_total=convert_amount(tax_total.tax_amount, with_currency=True)
        )
    return summation


def _convert_payment_means(means: ubl.PaymentMeans) -> cii.PaymentMeans:
    return cii.PaymentMeans(
        type_code=text_or_none(means.code),
        iban_id=text_or_none(means.payee_account_id),
    )


def _convert_payment_terms(
    terms: ubl.PaymentTerms, means: ubl.PaymentMeans | None
) -> cii.PaymentTerms:
    return cii.PaymentTerms(
        descriptions=tuple(convert_text(note) for note in terms.notes),
        due_date=convert_date(means.due_date) if means is not None else None,
    )


def _convert_period(period: ubl.Period | None) -> cii.BillingPeriod | None:
    if period is None:
        return None
    return cii.BillingPeriod(
        start=convert_date(period.start_date),
        end=convert_date(period.end_date),
    )


def build_trade_settlement(document: ubl.SourceDocument) -> cii.HeaderTradeSettlement:
    """Assemble ``ram:ApplicableHeaderTradeSettlement``.

    Payment reference, payment-means details and the payment terms due date
    all come from the first ``cac:PaymentMeans``.  The monetary summation is
    built from the legal monetary total first and then amended with the
    allowances and charges of parent lines.
    """
    first_means = document.payment_means[0] if document.payment_means else None

    payment_references: tuple[cii.Text, ...] = ()
    if first_means is not None and first_means.payment_ids:
        payment_references = (convert_text(first_means.payment_ids[0]),)

    taxes = tuple(
        convert_applicable_trade_tax(subtotal)
        for tax_total in document.tax_totals
        for subtotal in tax_total.subtotals
    )

    first_tax_total = document.tax_totals[0] if document.tax_totals else None
    summation = build_monetary_summation(document.monetary_total, first_tax_total)
    adjustment = redistribute_parent_allowances(document, summation)
    if adjustment.allowance_charges:
        log.debug(
            "Document %s: %d allowance(s)/charge(s) moved from parent lines",
            document.id,
            len(adjustment.allowance_charges),
        )

    return cii.HeaderTradeSettlement(
        payment_references=payment_references,
        currency_code=text_or_none(document.currency_code),
        payee=convert_party(document.payee),
        payment_means=(
            (_convert_payment_means(first_means),) if first_means is not None else ()
        ),
        taxes=taxes,
        billing_period=_convert_period(document.invoice_period),
        allowance_charges=tuple(
            convert_allowance_charge(ac) for ac in document.allowance_charges
        )
        + adjustment.allowance_charges,
        payment_terms=tuple(
            _convert_payment_terms(terms, first_means) for terms in document.payment_terms
        ),
        monetary_summation=adjustment.monetary_summation,
        accounting_account=document.accounting_cost,
    )


def build_trade_transaction(document: ubl.SourceDocument) -> cii.TradeTransaction:
    return cii.TradeTransaction(
        line_items=tuple(convert_lines(document.lines)),
        agreement=build_trade_agreement(document),
        delivery=build_trade_delivery(document.delivery),
        settlement=build_trade_settlement(document),
    )
