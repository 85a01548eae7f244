"""Signing and input helpers used by provider adapters."""
