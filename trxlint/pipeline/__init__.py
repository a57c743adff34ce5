"""Console rendering for CLI output."""
from .ui import console, print_header, print_status_panel, print_success, print_warning

__all__ = [
    "console", "print_header", "print_warning", "print_success", "print_status_panel",
]
