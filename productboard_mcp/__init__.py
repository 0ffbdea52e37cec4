"""Productboard tool server: permission-gated operations over a retrying, rate-governed API client."""

__version__ = "0.1.0"
