"""
Validation Package for Link Traffic Analyzer

Modules:
- urls: syntax validation of submitted URLs before any analysis work begins
"""

from .urls import is_valid_url, split_valid_urls

__all__ = ["is_valid_url", "split_valid_urls"]
