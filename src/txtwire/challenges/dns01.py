"""DNS-01 challenge helpers."""

import base64
import hashlib

from txtwire.models import ChallengeInfo

CHALLENGE_LABEL = "_acme-challenge"


def compute_dns_txt_value(key_authorization: str) -> str:
    """Compute the DNS TXT record value for DNS-01 challenge.

    The TXT record value is the base64url-encoded SHA-256 digest
    of the key authorization string.

    Args:
        key_authorization: The key authorization string.

    Returns:
        The base64url-encoded SHA-256 digest (without padding).
    """
    digest = hashlib.sha256(key_authorization.encode()).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode()


def to_fqdn(name: str) -> str:
    """Return name in trailing-dot form."""
    if not name or name.endswith("."):
        return name
    return name + "."


def un_fqdn(name: str) -> str:
    """Return name without its trailing dot."""
    if name.endswith("."):
        return name[:-1]
    return name


def get_challenge_fqdn(domain: str) -> str:
    """Return the challenge record name for a domain, trailing-dot form.

    Wildcard domains share the challenge name of their base domain.
    """
    domain = un_fqdn(domain.strip()).removeprefix("*.")
    return to_fqdn(f"{CHALLENGE_LABEL}.{domain}")


def get_challenge_info(domain: str, key_authorization: str) -> ChallengeInfo:
    """Derive the record name and value for a DNS-01 challenge.

    Args:
        domain: Domain being validated (may be a wildcard).
        key_authorization: ACME key authorization for the challenge.

    Returns:
        ChallengeInfo with the trailing-dot FQDN and the TXT value.
    """
    return ChallengeInfo(
        domain=domain,
        effective_fqdn=get_challenge_fqdn(domain),
        value=compute_dns_txt_value(key_authorization),
    )
