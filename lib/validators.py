#!/usr/bin/env python3

"""Validation utilities for provisioning requests."""

import re

DOMAIN_PATTERN = r'^[A-Za-z0-9.-]+$'
EMAIL_PATTERN = r'^[^@]+@[^@]+\.[^@]+$'


def validate_domain(domain: str) -> bool:
    """Validate a domain name against the accepted hostname grammar."""
    if not domain:
        return False
    if not re.fullmatch(DOMAIN_PATTERN, domain):
        return False
    # No empty labels: rejects ".", "..", ".a" and "a..b"
    return "" not in domain.split(".")


def validate_email(email: str) -> bool:
    """Check that an email address looks plausible."""
    if not email:
        return False
    return bool(re.fullmatch(EMAIL_PATTERN, email))


def validate_ip_address(ip: str) -> bool:
    """Validate an IPv4 address."""
    pattern = r'^(\d{1,3}\.){3}\d{1,3}$'
    if not re.match(pattern, ip):
        return False
    octets = ip.split('.')
    return all(0 <= int(octet) <= 255 for octet in octets)
