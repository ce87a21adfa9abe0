"""IPTV subscription aggregator."""

__version__ = "1.0.0"
