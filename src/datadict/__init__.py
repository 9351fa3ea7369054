"""datadict: relation validation, sync and ERD mapping for multi-layer data dictionaries."""

__version__ = "0.1.0"
