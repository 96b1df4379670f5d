"""Save-for-later content library: bulk URL ingestion pipeline."""

__version__ = "0.1.0"
