"""Utility helper functions for the registry."""

import re
import uuid
from typing import List, Optional

_ADDRESS_PATTERN = re.compile(r"^0x[0-9a-fA-F]{40}$")


def generate_uuid() -> str:
    """
    Generate a new UUID4 string.

    Returns:
        UUID4 string
    """
    return str(uuid.uuid4())


def parse_csv(value: Optional[str]) -> List[str]:
    """
    Parse a comma-separated string into a list.

    Args:
        value: Comma-separated values (e.g., "Alice,Bob")

    Returns:
        List of trimmed, non-empty strings in their original order
    """
    if not value:
        return []
    return [item.strip() for item in value.split(',') if item.strip()]


def is_valid_address(address: Optional[str]) -> bool:
    """Check that an address is 0x-prefixed, 42 characters of hex."""
    return bool(address) and _ADDRESS_PATTERN.match(address) is not None


def normalize_address(address: str) -> str:
    return address.strip().lower()
