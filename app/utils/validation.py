# app/utils/validation.py
import re
from typing import Any, Optional

from app.errors import InvalidEmail

EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]{2,}$', re.IGNORECASE)

IPV4_MAPPED_PREFIX = "::ffff:"

def normalize_email(raw: Any) -> str:
    """Validate an email and return its canonical form (trimmed, lowercase)"""
    if not isinstance(raw, str):
        raise InvalidEmail()

    email = raw.strip()
    if not email or not EMAIL_PATTERN.match(email):
        raise InvalidEmail()

    return email.lower()

def normalize_client_ip(host: Optional[str]) -> Optional[str]:
    """Strip the IPv6-mapped-IPv4 prefix from a client address"""
    if not host:
        return None

    host = host.strip()
    if host.lower().startswith(IPV4_MAPPED_PREFIX) and "." in host:
        host = host[len(IPV4_MAPPED_PREFIX):]

    return host or None
