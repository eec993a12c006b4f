"""Project-wide constants."""

from os import getenv


def _env_bool(name: str, default: str | None = None) -> bool:
    """Return a boolean flag read from the environment."""

    value = getenv(name)
    if value is None:
        value = default if default is not None else "0"
    value = str(value).strip().lower()
    return value not in {"0", "false", "no", "off", ""}


def _env_str(name: str, default: str) -> str:
    """Return a string setting read from the environment.

    Unset variables fall back to ``default``; an explicitly empty value is
    kept so that e.g. an empty output suffix can be configured.
    """

    raw = getenv(name)
    if raw is None:
        return default
    return str(raw).strip()


# CLI defaults (overridable via environment variables).
DEFAULT_TARGET_DIR = _env_str("UBL2CII_TARGET_DIR", ".")
DEFAULT_OUTPUT_SUFFIX = _env_str("UBL2CII_OUTPUT_SUFFIX", "-cii")

# Write indented CII XML.
PRETTY_PRINT = _env_bool("UBL2CII_PRETTY_PRINT", "1")

# Per-line trace logging inside the converter.
TRACE = _env_bool("UBL2CII_TRACE", "0")

# Format qualifier of CII date strings (CCYYMMDD).
CII_DATE_FORMAT = "102"

# Document reference type codes that may be copied to the CII
# AdditionalReferencedDocument (BT-17 tender/lot, BT-18 invoiced object).
ORIGINATOR_DOCUMENT_TYPE_CODE = "50"
VALID_DOCUMENT_REFERENCE_TYPE_CODES = frozenset({ORIGINATOR_DOCUMENT_TYPE_CODE, "130"})
FALLBACK_DOCUMENT_REFERENCE_TYPE_CODE = "916"

# CII tax registrations use "VA" where UBL says "VAT".
TAX_REGISTRATION_SCHEME_MAP = {"VAT": "VA"}
