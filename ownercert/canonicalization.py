"""
Ownership Certificate Canonicalization

Normalizes the strings that get embedded in a certificate identifier so
that encoding and decoding see byte-identical field values.

Rules:
- All embedded fields are lower-cased before the checksum is computed
- The subject prefix is the local part of an email (text before '@')
- The subject prefix keeps only [a-z0-9._+] and is capped at 8 characters,
  so it never contains the field delimiter and survives upper-casing
- An email without '@' degrades to using the whole string as the prefix
"""

import re

DELIMITER = "-"

SUBJECT_PREFIX_LENGTH = 8

_PREFIX_DISALLOWED = re.compile(r"[^a-z0-9._+]")


def canonicalize(value: str) -> str:
    """Return a compose-time field in canonical (lower) case."""
    return value.lower()


def email_local_part(email: str) -> str:
    """
    Return the lower-cased local part of an email address.

    A string without '@' is returned whole (lower-cased); this is
    intentional and not corrected.
    """
    return email.split("@", 1)[0].lower()


def subject_prefix(email: str) -> str:
    """
    Derive the embeddable subject prefix from a subject email.

    The full email is never recoverable from the prefix; callers who need
    the full identity must assert it out of band (signature path).
    """
    local = email_local_part(email)
    return _PREFIX_DISALLOWED.sub("", local)[:SUBJECT_PREFIX_LENGTH]


def mask_email(email: str, visible_chars: int = 3) -> str:
    """Mask an email for logging, e.g. 'alice@example.com' -> 'ali...'."""
    return email[:visible_chars] + "..."
