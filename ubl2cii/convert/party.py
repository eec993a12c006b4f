from __future__ import annotations

import logging

from ubl2cii.model import cii, ubl
from .primitives import (
    convert_address,
    convert_id,
    has_text,
    tax_registration_scheme,
    text_or_none,
)

log = logging.getLogger(__name__)


def _compose_person_name(person: ubl.Person) -> str | None:
    # Components are joined without separator.
    parts = (
        person.first_name,
        person.middle_name,
        person.family_name,
        person.name_suffix,
    )
    return text_or_none("".join(part or "" for part in parts))


def convert_telephone(value: str | None) -> cii.UniversalCommunication | None:
    if value is None:
        return None
    return cii.UniversalCommunication(complete_number=value)


def convert_email(value: str | None) -> cii.UniversalCommunication | None:
    if value is None:
        return None
    return cii.UniversalCommunication(uri_id=cii.ID(value=value))


def convert_contact(contact: ubl.Contact | None) -> cii.TradeContact | None:
    """Map a UBL ``cac:Contact`` to a trade contact."""
    if contact is None:
        return None
    return cii.TradeContact(
        person_name=contact.name,
        telephone=convert_telephone(contact.telephone),
        email=convert_email(contact.electronic_mail),
    )


def convert_person(person: ubl.Person | None) -> cii.TradeContact | None:
    """Map a UBL ``cac:Person``.

    Telephone and e-mail come from the person's own contact record; the
    display name is always the composed person name.
    """
    if person is None:
        return None
    base = convert_contact(person.contact) or cii.TradeContact()
    return cii.TradeContact(
        person_name=_compose_person_name(person),
        department_name=person.department,
        telephone=base.telephone,
        email=base.email,
    )


def _convert_contacts(party: ubl.Party) -> tuple[cii.TradeContact, ...]:
    if party.persons:
        return tuple(
            c for c in (convert_person(p) for p in party.persons) if c is not None
        )
    contact = convert_contact(party.contact)
    return (contact,) if contact is not None else ()


def _convert_legal_organization(
    legal_entity: ubl.LegalEntity,
) -> cii.LegalOrganization:
    return cii.LegalOrganization(
        id=convert_id(legal_entity.company_id),
        trading_business_name=text_or_none(legal_entity.registration_name),
        postal_address=convert_address(legal_entity.registration_address),
    )


def _convert_tax_registrations(
    party: ubl.Party,
) -> tuple[cii.TaxRegistration, ...]:
    if not party.tax_schemes:
        return ()
    tax_scheme = party.tax_schemes[0]
    if tax_scheme.company_id is None or tax_scheme.company_id.value is None:
        return ()
    reg_id = convert_id(tax_scheme.company_id)
    scheme = tax_registration_scheme(tax_scheme.tax_scheme_id)
    if has_text(scheme):
        reg_id = cii.ID(value=reg_id.value, scheme_id=scheme)
    return (cii.TaxRegistration(id=reg_id),)


def convert_party(party: ubl.Party | None) -> cii.TradeParty | None:
    """Build a ``ram:*TradeParty`` from a UBL ``cac:Party``.

    Only the first legal entity and the first tax scheme are used.  When the
    party has no ``cac:PartyName`` the registration name of the legal entity
    fills the mandatory CII name.
    """
    if party is None:
        return None

    name = text_or_none(party.name)
    legal_organization = None
    if party.legal_entities:
        legal_entity = party.legal_entities[0]
        if len(party.legal_entities) > 1:
            log.debug(
                "Party has %d legal entities, using the first one",
                len(party.legal_entities),
            )
        legal_organization = _convert_legal_organization(legal_entity)
        if name is None:
            name = text_or_none(legal_entity.registration_name)

    uri_communications: tuple[cii.UniversalCommunication, ...] = ()
    if party.endpoint_id is not None and has_text(party.endpoint_id.value):
        uri_communications = (
            cii.UniversalCommunication(uri_id=convert_id(party.endpoint_id)),
        )

    return cii.TradeParty(
        ids=tuple(
            i for i in (convert_id(pid) for pid in party.identifiers) if i is not None
        ),
        name=name,
        legal_organization=legal_organization,
        contacts=_convert_contacts(party),
        postal_address=convert_address(party.postal_address),
        uri_communications=uri_communications,
        tax_registrations=_convert_tax_registrations(party),
    )
