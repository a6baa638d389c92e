"""Barcode variant generation.

Scanners and catalogs disagree on zero padding and on whether the check digit
is part of the code, so a scanned barcode is tried under several encodings.
"""

import re

_SEPARATORS = re.compile(r"[\s-]+")

UPC_A_LENGTH = 12
EAN_13_LENGTH = 13


def upc_a_check_digit(body: str) -> int:
    """Check digit for the first 11 digits of a UPC-A code."""
    if len(body) != UPC_A_LENGTH - 1 or not body.isdigit():
        raise ValueError(f"UPC-A body must be 11 digits, got {body!r}")
    odd = sum(int(digit) for digit in body[0::2])
    even = sum(int(digit) for digit in body[1::2])
    return (10 - (odd * 3 + even) % 10) % 10


def ean13_check_digit(body: str) -> int:
    """Check digit for the first 12 digits of an EAN-13 code."""
    if len(body) != EAN_13_LENGTH - 1 or not body.isdigit():
        raise ValueError(f"EAN-13 body must be 12 digits, got {body!r}")
    total = sum(
        int(digit) * (3 if index % 2 else 1) for index, digit in enumerate(body)
    )
    return (10 - total % 10) % 10


def barcode_variants(code: str) -> list[str]:
    """Return candidate encodings of ``code``, raw code first, without duplicates."""
    raw = _SEPARATORS.sub("", code or "")
    if not raw:
        return []
    if not raw.isdigit() or len(raw) > EAN_13_LENGTH:
        return [raw]

    candidates = [raw, raw.zfill(UPC_A_LENGTH), raw.zfill(EAN_13_LENGTH)]
    if len(raw) < UPC_A_LENGTH:
        body = raw.zfill(UPC_A_LENGTH - 1)
        candidates.append(f"{body}{upc_a_check_digit(body)}")
    if len(raw) < EAN_13_LENGTH:
        body = raw.zfill(EAN_13_LENGTH - 1)
        candidates.append(f"{body}{ean13_check_digit(body)}")

    return list(dict.fromkeys(candidates))
