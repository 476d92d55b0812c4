# Clients subpackage - External API clients
from .cloudflare import (
    DomainRanking,
    ExistingScan,
    RadarClient,
    ScanStatus,
    UrlScannerClient,
)
from .content import ContentFetcher, extract_visible_text

__all__ = [
    "DomainRanking",
    "ExistingScan",
    "RadarClient",
    "ScanStatus",
    "UrlScannerClient",
    "ContentFetcher",
    "extract_visible_text",
]
