"""Namespace URIs of the UBL 2.1 and CII D16B documents."""

from enum import Enum


class UblNs(str, Enum):
    """UBL 2.1 namespaces."""

    INVOICE = "urn:oasis:names:specification:ubl:schema:xsd:Invoice-2"
    CREDIT_NOTE = "urn:oasis:names:specification:ubl:schema:xsd:CreditNote-2"
    CAC = "urn:oasis:names:specification:ubl:schema:xsd:CommonAggregateComponents-2"
    CBC = "urn:oasis:names:specification:ubl:schema:xsd:CommonBasicComponents-2"


class CiiNs(str, Enum):
    """CII D16B namespaces."""

    RSM = "urn:un:unece:uncefact:data:standard:CrossIndustryInvoice:100"
    RAM = "urn:un:unece:uncefact:data:standard:ReusableAggregateBusinessInformationEntity:100"
    UDT = "urn:un:unece:uncefact:data:standard:UnqualifiedDataType:100"
    QDT = "urn:un:unece:uncefact:data:standard:QualifiedDataType:100"
