"""
Rank-to-traffic estimation for Link Traffic Analyzer.

Traffic follows a power-law decay in rank (Zipf-style), calibrated so that:
- Rank 1: ~5B visitors/month
- Rank 100: ~200M visitors/month
- Rank 10000: ~8M visitors/month

Randomness only affects page views, reach and share rate. Pass any object
with a ``random()`` method (e.g. ``random.Random(seed)``) as ``rng`` to make
those values reproducible.
"""

import math
import random
import re
from dataclasses import dataclass
from typing import Protocol
from urllib.parse import urlsplit


BASE_VISITORS = 5_000_000_000
DECAY_EXPONENT = 0.7

UNKNOWN_BUCKET_RANK = 500_000

# Upper bucket boundary -> midpoint rank
BUCKET_MIDPOINTS = (
    (200, 100),
    (500, 350),
    (1_000, 750),
    (2_000, 1_500),
    (5_000, 3_500),
    (10_000, 7_500),
    (20_000, 15_000),
    (50_000, 35_000),
    (100_000, 75_000),
    (200_000, 150_000),
    (500_000, 350_000),
    (1_000_000, 750_000),
)

# Rank ceiling -> (share rate floor %, spread %)
SHARE_RATE_BANDS = (
    (100, 8.0, 7.0),
    (1_000, 5.0, 5.0),
    (10_000, 3.0, 4.0),
    (100_000, 1.0, 3.0),
)
SHARE_RATE_TAIL = (0.5, 2.0)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


class RandomSource(Protocol):
    def random(self) -> float: ...


@dataclass(frozen=True)
class TrafficEstimate:
    visitors: int
    page_views: int
    reach: int


def round_half_up(value: float, ndigits: int = 0) -> float:
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


def format_number(num: float) -> str:
    """Render a count with B/M/K suffixes, e.g. 5_000_000_000 -> '5.0B'."""
    if num >= 1_000_000_000:
        return f"{num / 1_000_000_000:.1f}B"
    if num >= 1_000_000:
        return f"{num / 1_000_000:.1f}M"
    if num >= 1_000:
        return f"{int(round_half_up(num / 1_000))}K"
    return f"{int(num)}"


def format_percent(value: float) -> str:
    """Percentage display; whole numbers drop the decimal, e.g. 5.0 -> "5%"."""
    if float(value).is_integer():
        return f"{int(value)}%"
    return f"{value}%"


def bucket_to_rank(bucket: str) -> int:
    """
    Convert a Cloudflare Radar bucket (e.g. "500", "50000") to the midpoint
    rank of that bucket.

    Only the leading integer of the string is read. Unparsable buckets map to
    500000, and buckets beyond the last boundary map to themselves.
    """
    match = _LEADING_INT.match(str(bucket or ""))
    if not match:
        return UNKNOWN_BUCKET_RANK

    bucket_num = int(match.group(1))
    for upper, midpoint in BUCKET_MIDPOINTS:
        if bucket_num <= upper:
            return midpoint
    return bucket_num


def estimate_traffic_from_rank(rank: int, rng: RandomSource = random) -> TrafficEstimate:
    """
    Estimate monthly visitors, page views and reach for a domain rank.

    Page views are 2-4x visitors; reach (annual audience) is 3-5x visitors.
    """
    if rank <= 0:
        return TrafficEstimate(visitors=0, page_views=0, reach=0)

    visitors = int(round_half_up(BASE_VISITORS / math.pow(rank, DECAY_EXPONENT)))
    page_views = int(round_half_up(visitors * (2 + rng.random() * 2)))
    reach = int(round_half_up(visitors * (3 + rng.random() * 2)))

    return TrafficEstimate(visitors=visitors, page_views=page_views, reach=reach)


def estimate_share_rate(rank: int, rng: RandomSource = random) -> float:
    """Share rate percentage, higher for better ranked sites."""
    floor, spread = SHARE_RATE_TAIL
    for ceiling, band_floor, band_spread in SHARE_RATE_BANDS:
        if rank <= ceiling:
            floor, spread = band_floor, band_spread
            break
    return round_half_up(floor + rng.random() * spread, 1)


def normalize_hostname(url: str) -> str:
    """Hostname of ``url`` without a leading 'www.'"""
    hostname = urlsplit(url).hostname
    if not hostname:
        raise ValueError(f"URL has no hostname: {url}")
    if hostname.startswith("www."):
        hostname = hostname[4:]
    return hostname


def heuristic_rank(hostname: str) -> int:
    """Synthetic rank for domains missing from the ranking provider."""
    if hostname.endswith(".gov") or hostname.endswith(".edu"):
        return 50_000
    if hostname.endswith(".org"):
        return 100_000
    # Short domains tend to be more established
    if len(hostname) < 10:
        return 200_000
    return 500_000
