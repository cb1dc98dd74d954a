"""Printable document generation."""
