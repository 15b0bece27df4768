"""Report service exports."""

from .summary import generate_report

__all__ = ["generate_report"]
