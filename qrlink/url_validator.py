# -*- coding: utf-8 -*-
"""
Destination URL Validator

Decides whether a string may be stored and served as a public redirect target.
Checks run in order and stop at the first failure:

    1. empty input            -> EmptyInput
    2. length                 -> TooLong
    3. parse                  -> MalformedUrl
    4. scheme allow-list      -> DisallowedProtocol
    5. hostname blocklist     -> BlockedHost
    6. userinfo in authority  -> EmbeddedCredentials

Host checks work on the literal hostname text; no DNS lookups are made. The
redirect itself happens in the visitor's browser, so the concern is steering
internal tooling and previews towards internal endpoints, plus protocol and
credential hygiene.

Functions:
    validate_url: Full creation-time check
    validate_url_strict: validate_url plus rejection of single-label hosts
    validate_redirect_url: Protocol-only re-check used at redirect time
"""

import ipaddress
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union
from urllib.parse import SplitResult, quote, urlsplit

from . import config
from .errors import UrlErrorKind

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]

_SCHEME_RE = re.compile(r'^[A-Za-z][A-Za-z0-9+.-]*$')
_CONTROL_RE = re.compile(r'[\x00-\x1f\x7f]')
_HOST_RE = re.compile(r'^[a-z0-9_.-]+$')

_PATH_SAFE = "/%:@!$&'()*+,;=-._~"
_QUERY_SAFE = "/?%:@!$&'()*+,;=-._~"

MESSAGES = {
    UrlErrorKind.EMPTY_INPUT: 'URL is required',
    UrlErrorKind.TOO_LONG: f'URL is too long (max {config.URL_MAX_LENGTH} characters)',
    UrlErrorKind.MALFORMED_URL: 'Invalid URL format',
    UrlErrorKind.DISALLOWED_PROTOCOL: 'Only HTTP and HTTPS URLs are allowed',
    UrlErrorKind.BLOCKED_HOST: 'This hostname is not allowed',
    UrlErrorKind.EMBEDDED_CREDENTIALS: 'URLs with embedded credentials are not allowed',
    UrlErrorKind.SINGLE_LABEL_HOST: 'Single-label hostnames are not allowed',
}


@dataclass(frozen=True)
class UrlValidationResult:
    is_valid: bool
    error: Optional[str] = None
    normalized_url: Optional[str] = None
    kind: Optional[UrlErrorKind] = None

    @classmethod
    def ok(cls, normalized_url: str) -> 'UrlValidationResult':
        return cls(is_valid=True, normalized_url=normalized_url)

    @classmethod
    def fail(cls, kind: UrlErrorKind) -> 'UrlValidationResult':
        return cls(is_valid=False, error=MESSAGES[kind], kind=kind)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {'isValid': self.is_valid}
        if self.error is not None:
            out['error'] = self.error
        if self.kind is not None:
            out['kind'] = self.kind.value
        if self.normalized_url is not None:
            out['normalizedUrl'] = self.normalized_url
        return out


def _parse_ipv4_number(part: str) -> Optional[int]:
    """One component of a numeric IPv4 host: decimal, 0x hex or leading-zero octal."""
    if not part:
        return None
    try:
        if part[:2].lower() == '0x':
            return int(part[2:] or '0', 16)
        if len(part) > 1 and part.startswith('0'):
            return int(part[1:], 8)
        return int(part, 10)
    except ValueError:
        return None


def parse_ipv4_shorthand(host: str) -> Optional[ipaddress.IPv4Address]:
    """
    Interpret the numeric IPv4 spellings browsers accept, such as
    ``2130706433``, ``0x7f000001``, ``0177.0.0.1`` or ``127.1``.
    """
    parts = host.split('.')
    if parts and parts[-1] == '':
        parts = parts[:-1]
    if not 1 <= len(parts) <= 4:
        return None
    numbers = [_parse_ipv4_number(p) for p in parts]
    if any(n is None for n in numbers):
        return None
    *head, last = numbers
    if any(n > 255 for n in head) or last >= 256 ** (5 - len(numbers)):
        return None
    value = last
    for i, n in enumerate(head):
        value += n << (8 * (3 - i))
    return ipaddress.IPv4Address(value)


def parse_ip_literal(host: str) -> Optional[IPAddress]:
    """Return the address if ``host`` is an IPv4/IPv6 literal, else None."""
    if ':' in host:
        # IPv6 zone ids (fe80::1%eth0) are dropped
        host = host.split('%', 1)[0]
    try:
        return ipaddress.ip_address(host)
    except ValueError:
        return parse_ipv4_shorthand(host)


def _is_internal_address(ip: IPAddress) -> bool:
    if isinstance(ip, ipaddress.IPv6Address) and ip.ipv4_mapped is not None:
        ip = ip.ipv4_mapped
    return (
        ip.is_private
        or ip.is_loopback
        or ip.is_link_local
        or ip.is_unspecified
        or ip.is_reserved
        or ip.is_multicast
        or str(ip) in config.METADATA_ENDPOINTS
    )


def is_private_ip(host: str) -> bool:
    ip = parse_ip_literal(host)
    return ip is not None and _is_internal_address(ip)


def is_blocked_hostname(hostname: str) -> bool:
    """
    True for localhost names, .local/.localhost suffixes, cloud metadata hosts,
    and private, loopback, link-local or unspecified IP literals.
    """
    host = hostname.lower().rstrip('.')
    if host in config.BLOCKED_HOSTNAMES or host in config.METADATA_ENDPOINTS:
        return True
    if host == 'localhost' or host.endswith(config.BLOCKED_HOST_SUFFIXES):
        return True
    return is_private_ip(host)


def _browser_slashes(candidate: str) -> str:
    """
    Read backslashes before the query as slashes for http(s), as browsers do.

    ``http://127.0.0.1\\.evil.com/`` is opened as host ``127.0.0.1``, so it
    has to be checked as that host.
    """
    scheme, sep, _ = candidate.partition(':')
    if not sep or scheme.lower() not in config.ALLOWED_SCHEMES:
        return candidate
    end = len(candidate)
    for mark in ('?', '#'):
        index = candidate.find(mark)
        if index != -1:
            end = min(end, index)
    return candidate[:end].replace('\\', '/') + candidate[end:]


def _parse(candidate: str) -> Optional[SplitResult]:
    if _CONTROL_RE.search(candidate):
        return None
    candidate = _browser_slashes(candidate)
    try:
        parts = urlsplit(candidate)
        _ = parts.port  # ValueError for out-of-range or non-numeric ports
    except ValueError:
        return None
    if not parts.scheme or not _SCHEME_RE.match(parts.scheme):
        return None
    if ' ' in parts.netloc:
        return None
    return parts


def _canonical_host(hostname: str) -> Optional[str]:
    host = hostname.lower().rstrip('.')
    if not host:
        return None
    ip = parse_ip_literal(host)
    if isinstance(ip, ipaddress.IPv6Address):
        return f'[{ip.compressed}]'
    if ip is not None:
        return str(ip)
    try:
        host = host.encode('idna').decode('ascii')
    except UnicodeError:
        return None
    # Anything else (%, \, !, ...) is read differently by browsers
    return host if _HOST_RE.match(host) else None


def _normalize(parts: SplitResult, host: str) -> str:
    scheme = parts.scheme.lower()
    port = parts.port
    default_port = {'http': 80, 'https': 443}.get(scheme)
    netloc = host if port is None or port == default_port else f'{host}:{port}'
    path = quote(parts.path, safe=_PATH_SAFE) or '/'
    url = f'{scheme}://{netloc}{path}'
    if parts.query:
        url += '?' + quote(parts.query, safe=_QUERY_SAFE)
    if parts.fragment:
        url += '#' + quote(parts.fragment, safe=_QUERY_SAFE)
    return url


def validate_url(candidate: Any) -> UrlValidationResult:
    """
    Validate a destination URL for a QR code.

    Never raises: every failure comes back as an invalid result naming the
    rule that failed.

    Example:
        >>> validate_url("https://example.com/menu").normalized_url
        'https://example.com/menu'
        >>> validate_url("javascript:alert(1)").kind
        <UrlErrorKind.DISALLOWED_PROTOCOL: 'DisallowedProtocol'>
    """
    trimmed = candidate.strip() if isinstance(candidate, str) else ''
    if not trimmed:
        return UrlValidationResult.fail(UrlErrorKind.EMPTY_INPUT)

    if len(trimmed) > config.URL_MAX_LENGTH:
        return UrlValidationResult.fail(UrlErrorKind.TOO_LONG)

    parts = _parse(trimmed)
    if parts is None:
        return UrlValidationResult.fail(UrlErrorKind.MALFORMED_URL)

    if parts.scheme.lower() not in config.ALLOWED_SCHEMES:
        return UrlValidationResult.fail(UrlErrorKind.DISALLOWED_PROTOCOL)

    host = _canonical_host(parts.hostname or '')
    if host is None:
        return UrlValidationResult.fail(UrlErrorKind.MALFORMED_URL)

    if is_blocked_hostname(host.strip('[]')):
        return UrlValidationResult.fail(UrlErrorKind.BLOCKED_HOST)

    if parts.username or parts.password or '@' in parts.netloc:
        return UrlValidationResult.fail(UrlErrorKind.EMBEDDED_CREDENTIALS)

    return UrlValidationResult.ok(_normalize(parts, host))


def validate_url_strict(candidate: Any) -> UrlValidationResult:
    """
    validate_url plus rejection of bare intranet names such as ``http://intranet/``.

    A single-label host is allowed only when it is itself an IP literal
    (which validate_url has already cleared as public).
    """
    result = validate_url(candidate)
    if not result.is_valid:
        return result

    hostname = urlsplit(result.normalized_url).hostname or ''
    if '.' not in hostname and ':' not in hostname and parse_ip_literal(hostname) is None:
        return UrlValidationResult.fail(UrlErrorKind.SINGLE_LABEL_HOST)
    return result


def validate_redirect_url(url: Any) -> bool:
    """
    Light re-check applied when serving a stored destination.

    Only re-parses and re-checks the scheme; the full policy ran when the
    destination was saved.
    """
    if not isinstance(url, str) or not url.strip():
        return False
    parts = _parse(url.strip())
    if parts is None or not parts.netloc:
        return False
    return parts.scheme.lower() in config.ALLOWED_SCHEMES
