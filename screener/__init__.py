"""Resume screener backend: privileged account and organization endpoints."""

__version__ = "0.1.0"
