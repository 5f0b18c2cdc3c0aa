"""
Booking references

Human-readable references of the form PREFIX-XXXXX-XXXX drawn from A-Z0-9.
Uniqueness is enforced by the store; callers retry on DuplicateReference.
"""

import re
import secrets
import string

REFERENCE_ALPHABET = string.ascii_uppercase + string.digits
REFERENCE_PATTERN = re.compile(r'^[A-Z0-9]{2,10}-[A-Z0-9]{5}-[A-Z0-9]{4}$')


def _segment(length: int) -> str:
    return ''.join(secrets.choice(REFERENCE_ALPHABET) for _ in range(length))


def generate_reference(prefix: str = 'ATT') -> str:
    return f"{prefix.upper()}-{_segment(5)}-{_segment(4)}"


def is_valid_reference(value: str) -> bool:
    return bool(REFERENCE_PATTERN.match(value or ''))
