"""Allow running as ``python -m trxlint``."""

from trxlint.cli import main

if __name__ == "__main__":
    main()
