"""
URL validation for analysis requests.

Entries must be absolute http(s) URLs with a host. Valid entries are only
stripped of surrounding whitespace, not normalized, so results echo what the
user submitted.
"""

from typing import List, Tuple
from pydantic import HttpUrl, TypeAdapter, ValidationError

_http_url = TypeAdapter(HttpUrl)


def is_valid_url(url: str) -> bool:
    if not isinstance(url, str) or not url.strip():
        return False
    try:
        _http_url.validate_python(url.strip())
    except ValidationError:
        return False
    return True


def split_valid_urls(urls: List[str]) -> Tuple[List[str], List[str]]:
    """
    Partition submitted URLs.

    Returns:
        (valid_urls, errors) where errors holds one "Invalid URL: ..." message
        per rejected entry, in submission order.
    """
    valid_urls: List[str] = []
    errors: List[str] = []

    for url in urls:
        if is_valid_url(url):
            valid_urls.append(url.strip())
        else:
            errors.append(f"Invalid URL: {url}")

    return valid_urls, errors
