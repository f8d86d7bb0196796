"""Claim verification and safe auto-remediation for markdown posts."""

__version__ = "0.1.0"
