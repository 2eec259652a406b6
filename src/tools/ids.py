"""Reference number generation for records created by the assistant."""

import uuid

REFUND_PREFIX = "RFD-"
TICKET_PREFIX = "TCK-"
RETURN_PREFIX = "RTN-"


def generate_reference(prefix: str) -> str:
    """Return ``prefix`` followed by a short upper-case random token."""
    return f"{prefix}{uuid.uuid4().hex[:8].upper()}"
