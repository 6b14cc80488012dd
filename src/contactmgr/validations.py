"""
Normalization and validation of registrant contact data.

Centralized character length "buckets" live here too, so the validator and
anything that displays limits to the operator stay in sync. Import and use like:

from contactmgr.validations import (
    normalize_contact,
    validate_contact,
    clean_contact_set,
)

# Example (one record):
# record = normalize_contact({"first_name": " Jane ", "country": "us", ...})
# problems = validate_contact(record)  # [] when valid

# Example (every role at once, raising on the first bad role):
# contact_set = clean_contact_set(ContactSet.uniform(record))
"""

import logging
import re
from typing import Dict, List, Mapping

import phonenumbers
from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from phonenumber_field.phonenumber import PhoneNumber

from contactmgr.utility.constants import (
    CA_PROVINCE_CODES,
    SUBDIVISION_CODES,
    SUPPORTED_COUNTRY_CODES,
    US_STATE_CODES,
    ContactRole,
)
from contactmgr.utility.contact_data import (
    OPTIONAL_FIELDS,
    REQUIRED_FIELDS,
    ContactRecord,
    ContactSet,
)
from contactmgr.utility.errors import ContactValidationError

logger = logging.getLogger(__name__)

# Short single-line text inputs like first_name, last_name, city, organization, address2
TEXT_SHORT = 100

# Extended single-line text inputs like the first address line
TEXT_EXTENDED = 200

# Postal codes around the world fall between these
ZIP_MIN = 2
ZIP_MAX = 20

# E.164: a plus, a country code that does not start with 0, at most 15 digits in total
E164_PATTERN = re.compile(r"^\+[1-9]\d{1,14}$")

REGISTRANT_REQUIRED = "registrant contact is required"


def _as_mapping(contact):
    """Returns the contact as a mapping, or None if it is not record-shaped."""
    if isinstance(contact, ContactRecord):
        return contact.to_payload()
    if isinstance(contact, Mapping):
        return contact
    return None


def _text(data, field_name) -> str:
    value = data.get(field_name)
    return "" if value is None else str(value)


def is_e164(value: str) -> bool:
    """True if `value` is an international number like +12025551234."""
    if not E164_PATTERN.match(value):
        return False
    try:
        phone_number = PhoneNumber.from_string(value)
    except phonenumbers.NumberParseException:
        return False
    return phonenumbers.is_possible_number(phone_number)


def is_email(value: str) -> bool:
    try:
        validate_email(value)
    except ValidationError:
        return False
    return True


def normalize_contact(contact) -> ContactRecord:
    """Returns the canonical form of a contact.

    Every field is trimmed, email is lower-cased, country and state are
    upper-cased. Optional fields that are missing or blank come back as None.
    Never fails: anything that is not record-shaped normalizes to an empty record.
    """
    data = _as_mapping(contact) or {}

    normalized = {field_name: _text(data, field_name).strip() for field_name in REQUIRED_FIELDS}
    normalized["email"] = normalized["email"].lower()
    normalized["country"] = normalized["country"].upper()

    for field_name in OPTIONAL_FIELDS:
        value = _text(data, field_name).strip()
        if field_name == "state":
            value = value.upper()
        normalized[field_name] = value or None

    return ContactRecord(**normalized)


def _check_length(errors: List[str], data, field_name: str, limit: int):
    if len(_text(data, field_name)) > limit:
        errors.append(f"{field_name} must be {limit} characters or less")


def validate_contact(contact) -> List[str]:
    """Returns every problem with the contact, in a stable order. An empty list means valid.

    Expects a normalized record (see normalize_contact) but never raises on bad input.
    """
    data = _as_mapping(contact)
    if data is None:
        return ["Contact info must be an object"]

    errors: List[str] = []

    for field_name in REQUIRED_FIELDS:
        if not _text(data, field_name).strip():
            errors.append(f"{field_name} is required")

    _check_length(errors, data, "first_name", TEXT_SHORT)
    _check_length(errors, data, "last_name", TEXT_SHORT)

    email = _text(data, "email")
    if email and not is_email(email):
        errors.append("email must be a valid email address")

    phone = _text(data, "phone").strip()
    if phone and not is_e164(phone):
        errors.append("phone must be in E.164 format (e.g., +12025551234)")

    _check_length(errors, data, "organization", TEXT_SHORT)
    _check_length(errors, data, "address", TEXT_EXTENDED)
    _check_length(errors, data, "address2", TEXT_SHORT)
    _check_length(errors, data, "city", TEXT_SHORT)

    country = _text(data, "country").strip().upper()
    state = _text(data, "state").strip().upper()

    if country in SUBDIVISION_CODES and not state:
        errors.append("state is required for US/CA addresses")

    if state:
        if country == "US" and state not in US_STATE_CODES:
            errors.append("state must be a valid US state code")
        elif country == "CA" and state not in CA_PROVINCE_CODES:
            errors.append("state must be a valid Canadian province code")

    zip_code = _text(data, "zip").strip()
    if zip_code and not (ZIP_MIN <= len(zip_code) <= ZIP_MAX):
        errors.append(f"zip code must be {ZIP_MIN}-{ZIP_MAX} characters")

    if country and country not in SUPPORTED_COUNTRY_CODES:
        errors.append("country must be a valid ISO 3166-1 alpha-2 code")

    fax = _text(data, "fax").strip()
    if fax and not is_e164(fax):
        errors.append("fax must be in E.164 format (e.g., +12025551234)")

    return errors


def normalize_contact_set(contact_set: ContactSet) -> ContactSet:
    return ContactSet({role: normalize_contact(record) for role, record in contact_set.items()})


def validate_contact_set(contact_set: ContactSet) -> Dict[str, List[str]]:
    """Validates each role on its own. Only roles with problems are returned, keyed by role name."""
    violations = {}
    for role, record in contact_set.items():
        errors = validate_contact(record)
        if errors:
            violations[role.value] = errors
    return violations


def clean_contact_set(contact_set: ContactSet) -> ContactSet:
    """Normalizes, then validates, every role. The registrant must be one of them.

    Raises:
        ContactValidationError: listing every problem for every failing role.
    """
    normalized = normalize_contact_set(contact_set)
    violations = validate_contact_set(normalized)
    if ContactRole.REGISTRANT not in normalized:
        violations = {ContactRole.REGISTRANT.value: [REGISTRANT_REQUIRED], **violations}
    if violations:
        logger.warning(f"Contact validation failed for {', '.join(violations)}")
        raise ContactValidationError(violations)
    return normalized
