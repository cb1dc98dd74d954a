"""Core infrastructure shared by every Proxy Printer module."""
