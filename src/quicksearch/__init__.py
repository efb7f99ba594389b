"""QuickSearch: local multi-source search core for a launcher."""

__version__ = "0.1.0"
