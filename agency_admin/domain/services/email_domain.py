"""Email/website domain helpers used to verify agency claims."""

import re
from typing import Optional
from urllib.parse import urlsplit

FREE_EMAIL_DOMAINS = [
    "gmail.com",
    "yahoo.com",
    "hotmail.com",
    "outlook.com",
    "aol.com",
    "icloud.com",
    "protonmail.com",
    "mail.com",
    "live.com",
    "msn.com",
    "ymail.com",
    "gmx.com",
    "zoho.com",
]

_HOST_PATTERN = re.compile(r"^[a-z0-9-]+(\.[a-z0-9-]+)*(:\d+)?$")


def extract_email_domain(email: str) -> str:
    """Extract the lower-cased domain of an email address.

    Raises:
        ValueError: If the address is not ``local@domain`` without whitespace
    """
    if not email or any(ch.isspace() for ch in email):
        raise ValueError("Invalid email format")

    parts = email.split("@")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise ValueError("Invalid email format")

    return parts[1].lower()


def extract_website_domain(url: str) -> str:
    """Extract the host (and explicit port) of a website URL.

    ``https://www.Example.com/about`` becomes ``example.com``. A missing
    scheme is assumed to be https.

    Raises:
        ValueError: If no valid host can be read from the URL
    """
    url = (url or "").strip()
    if not url:
        raise ValueError("Invalid URL format")

    if not re.match(r"^[a-zA-Z][a-zA-Z0-9+.-]*://", url):
        url = f"https://{url}"

    try:
        host = urlsplit(url).netloc.lower()
    except ValueError:
        raise ValueError("Invalid URL format")

    # Drop credentials
    host = host.rsplit("@", 1)[-1]
    if host.startswith("www."):
        host = host[4:]

    if not host or not _HOST_PATTERN.match(host):
        raise ValueError("Invalid URL format")
    return host


def verify_email_domain(email: str, website: Optional[str]) -> bool:
    """Check whether an email address belongs to the website's domain.

    Subdomains must match exactly: ``john@sub.example.com`` does not verify
    against ``example.com``.
    """
    if not website:
        return False
    try:
        return extract_email_domain(email) == extract_website_domain(website)
    except ValueError:
        return False


def is_free_email_domain(email: str) -> bool:
    """Check whether an email uses a free-mail provider."""
    try:
        return extract_email_domain(email) in FREE_EMAIL_DOMAINS
    except ValueError:
        return False
