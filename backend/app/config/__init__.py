"""Configuration package for the crypto-ledger service."""

from .settings import AppSettings, get_settings

__all__ = ["AppSettings", "get_settings"]
