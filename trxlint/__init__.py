"""trxlint - catches Objection.js queries that escape their transaction."""

__version__ = "0.3.0"
