"""trxlint AST-based rule definitions."""

from .objection import find_missing_trx_forwarding

__all__ = [
    "find_missing_trx_forwarding",
]
