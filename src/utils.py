"""Shared utilities used across the order support assistant."""

import re

EMAIL_LOCAL_MASK = "*****@"
EMAIL_DOMAIN_SUFFIX = "***.com"
PHONE_MASK_CHAR = "x"


def mask_email(email: str) -> str:
    """Obfuscate an email address for display.

    Keeps the first character of the local part and of the domain's first
    label. The rest is replaced by a fixed mask, so the output is cosmetic
    and not reversible.

    Examples:
        >>> mask_email("priya.sharma@gmail.com")
        'p*****@g***.com'
        >>> mask_email("")
        ''
    """
    if not email:
        return ""
    local, _, domain = email.partition("@")
    return local[:1] + EMAIL_LOCAL_MASK + domain.split(".")[0][:1] + EMAIL_DOMAIN_SUFFIX


def mask_phone(phone: str) -> str:
    """Replace every digit except the last four characters with ``x``.

    Examples:
        >>> mask_phone("+91 98765 43210")
        '+xx xxxxx x3210'
        >>> mask_phone("")
        ''
    """
    if not phone:
        return ""
    return re.sub(r"\d", PHONE_MASK_CHAR, phone[:-4]) + phone[-4:]
