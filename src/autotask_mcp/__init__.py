"""Autotask PSA tools with company and resource name enrichment."""

__version__ = "0.1.0"
