# Utils package - Utility modules organized by domain
# Import from subpackages for convenience

from .clients import ContentFetcher, RadarClient, UrlScannerClient
from .image_processor import prepare_screenshot
from .validation import split_valid_urls

__all__ = [
    "ContentFetcher",
    "RadarClient",
    "UrlScannerClient",
    "prepare_screenshot",
    "split_valid_urls",
]
