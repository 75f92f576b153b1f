"""ABR Lookup - Australian Business Register client."""

__version__ = "0.1.0"
