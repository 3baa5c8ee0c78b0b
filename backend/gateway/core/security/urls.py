"""URL validation for server-side fetches (SSRF guard)."""

import ipaddress
import re
from typing import Any, Optional

import httpx

from gateway.core.security.patterns import (
    ALLOWED_URL_SCHEMES,
    BLOCKED_HOSTNAME_PATTERNS,
    BLOCKED_HOSTNAMES,
)
from gateway.core.security.verdict import Accepted, Rejected, RejectionReason, Verdict

_IPV4_NUMBER = re.compile(r"^(?:[0-9]+|0x[0-9a-f]*)$", re.ASCII)


def _parse_ipv4_part(part: str) -> int:
    if not _IPV4_NUMBER.match(part):
        raise ValueError(part)
    if part.startswith("0x"):
        return int(part[2:], 16) if len(part) > 2 else 0
    if len(part) > 1 and part.startswith("0"):
        return int(part[1:], 8)
    return int(part)


def _parse_numeric_ipv4(host: str) -> Optional[ipaddress.IPv4Address]:
    """
    Read the shorthand IPv4 forms browsers and URL libraries accept.

    ``127.1``, ``2130706433``, ``0x7f.0.0.1`` and ``0177.0.0.1`` all name
    127.0.0.1. Returns None when the host does not end in a number, i.e. it
    is a regular domain name.

    Raises:
        ValueError: If the host ends in a number but is not a valid address
    """
    parts = host.split(".")
    if not _IPV4_NUMBER.match(parts[-1]):
        return None
    if len(parts) > 4 or any(not part for part in parts):
        raise ValueError(host)

    numbers = [_parse_ipv4_part(part) for part in parts]
    *leading, last = numbers
    if any(number > 255 for number in leading) or last >= 256 ** (5 - len(numbers)):
        raise ValueError(host)

    value = last
    for index, number in enumerate(leading):
        value += number << (8 * (3 - index))
    return ipaddress.IPv4Address(value)


def _canonical_host(host: str) -> str:
    """
    Lower-case a host and reduce IP literals to one spelling.

    IPv6 literals are compressed (``0:0::1`` -> ``::1``) and IPv4 shorthand
    is expanded to dotted-quad (``127.1`` -> ``127.0.0.1``).

    Raises:
        ValueError: For numeric hosts that are not valid IPv4 addresses
    """
    host = host.lower()
    if host.endswith("."):
        host = host[:-1]
    try:
        address = ipaddress.ip_address(host.strip("[]"))
    except ValueError:
        numeric = _parse_numeric_ipv4(host)
        return numeric.compressed if numeric else host
    # IPv4-mapped IPv6 (::ffff:10.0.0.1) is judged as the IPv4 address
    mapped = getattr(address, "ipv4_mapped", None)
    return (mapped or address).compressed


def _is_ipv4(host: str) -> bool:
    try:
        return isinstance(ipaddress.ip_address(host), ipaddress.IPv4Address)
    except ValueError:
        return False


def is_blocked_host(host: str) -> bool:
    """Check a hostname against the loopback/metadata/private-range tables."""
    try:
        hostname = _canonical_host(host)
    except ValueError:
        return True
    if hostname in BLOCKED_HOSTNAMES:
        return True
    return any(pattern.search(hostname) for pattern in BLOCKED_HOSTNAME_PATTERNS)


def validate_url(value: Any) -> Verdict[httpx.URL]:
    """
    Validate a client supplied URL before any outbound fetch.

    Only absolute http/https URLs whose host is not loopback, cloud metadata
    or a private/link-local range are accepted.

    Args:
        value: Raw URL string

    Returns:
        Accepted(httpx.URL) or Rejected

    Note: Hostnames are judged literally, DNS is not resolved here. Fetch
    with the returned URL object rather than re-parsing the raw string.
    """
    if not isinstance(value, str):
        return Rejected(RejectionReason.INVALID_FORMAT, "Invalid URL format.")

    try:
        url = httpx.URL(value.strip())
    except (httpx.InvalidURL, ValueError):
        return Rejected(RejectionReason.INVALID_FORMAT, "Invalid URL format.")

    scheme = url.scheme.lower()
    if not scheme:
        return Rejected(RejectionReason.INVALID_FORMAT, "Invalid URL format.")

    if scheme not in ALLOWED_URL_SCHEMES:
        return Rejected(
            RejectionReason.INVALID_PROTOCOL,
            f"Invalid protocol: {scheme}:. Only http and https are allowed.",
            detail=scheme,
        )

    if not url.host:
        return Rejected(RejectionReason.INVALID_FORMAT, "Invalid URL format.")

    try:
        host = _canonical_host(url.host)
    except ValueError:
        return Rejected(RejectionReason.INVALID_FORMAT, "Invalid URL format.", detail=url.host)

    if is_blocked_host(host):
        return Rejected(
            RejectionReason.BLOCKED_NETWORK,
            "Internal, private network and metadata URLs are not allowed.",
            detail=url.host,
        )

    if host != url.host and _is_ipv4(host):
        # fetch the dotted-quad that was judged, not the shorthand spelling
        url = url.copy_with(host=host)

    return Accepted(url)
