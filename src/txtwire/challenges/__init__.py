"""ACME challenge helpers."""

from txtwire.challenges.dns01 import compute_dns_txt_value, get_challenge_info

__all__ = ["compute_dns_txt_value", "get_challenge_info"]
