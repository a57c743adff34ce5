"""Click commands for the trxlint CLI."""
