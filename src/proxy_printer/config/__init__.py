"""Configuration: environment-driven settings and per-request options."""
