"""Objection.js rule modules for transaction forwarding."""

from .require_trx_forwarding import find_missing_trx_forwarding

__all__ = ["find_missing_trx_forwarding"]
