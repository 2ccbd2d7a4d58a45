"""
IP address detection for wiki user names.

Anonymous edits store the editor's IP address where a registered edit stores
the account name, so any name shaped like an address, a CIDR block or an
address range must never become a user account.
"""

import ipaddress
import re

RE_IP_BYTE = r'(?:25[0-5]|2[0-4][0-9]|1[0-9][0-9]|0?[0-9]?[0-9])'
RE_IP_ADD = rf'{RE_IP_BYTE}\.{RE_IP_BYTE}\.{RE_IP_BYTE}\.{RE_IP_BYTE}'

# Prefix match: anything after a well-formed address is ignored
IPV4_PATTERN = re.compile(rf'^{RE_IP_ADD}')
IPV4_ADDRESS_PATTERN = re.compile(rf'^{RE_IP_ADD}$')
RANGE_PATTERN = re.compile(r'^(\S+)\s*-\s*(\S+)$')


def _is_ipv6(value: str, allow_prefix: bool = True) -> bool:
    if '%' in value:
        return False
    try:
        if '/' in value:
            if not allow_prefix:
                return False
            ipaddress.IPv6Network(value, strict=False)
        else:
            ipaddress.IPv6Address(value)
    except ValueError:
        return False
    return True


def _is_single_address(value: str) -> bool:
    return bool(IPV4_PATTERN.match(value)) or _is_ipv6(value)


def _is_range(value: str) -> bool:
    match = RANGE_PATTERN.match(value)
    if not match:
        return False
    start, end = match.groups()
    if IPV4_ADDRESS_PATTERN.match(start) and IPV4_ADDRESS_PATTERN.match(end):
        return True
    return _is_ipv6(start, allow_prefix=False) and _is_ipv6(end, allow_prefix=False)


def is_ip_address(name) -> bool:
    """
    Check whether a user name is an IPv4/IPv6 address, block or range.

    Accepts '192.0.2.1', '192.000.002.001', '203.0.113.0/24', '2001:db8::1',
    '2001:db8::/32' and ranges such as '192.0.2.1 - 192.0.2.9'. Any name that
    starts with an IPv4 address counts, so '192.0.2.1abc' is an IP as well.
    IPv6 names must be a whole address or block.

    Args:
        name: User name as stored in the source table

    Returns:
        True if the name denotes an IP address rather than an account
    """
    if not isinstance(name, str):
        return False
    value = name.strip()
    if not value:
        return False
    return _is_single_address(value) or _is_range(value)
