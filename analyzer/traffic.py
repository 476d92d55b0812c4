"""
Traffic data source selection.

Tries Cloudflare Radar for an exact rank first, then falls back to a
heuristic estimate. The returned TrafficData always carries its provenance
(exact vs estimated) so renderers can surface it.
"""

import logging
import random
from typing import Optional

from analyzer.estimation import (
    RandomSource,
    bucket_to_rank,
    estimate_share_rate,
    estimate_traffic_from_rank,
    format_number,
    format_percent,
    heuristic_rank,
    normalize_hostname,
)
from models import DataSource, TrafficData
from utils.clients.cloudflare import RadarClient

logger = logging.getLogger(__name__)


def build_estimated_traffic(url: str, rng: RandomSource = random) -> TrafficData:
    """Fallback estimate for domains without Radar ranking data."""
    rank = heuristic_rank(normalize_hostname(url))
    estimate = estimate_traffic_from_rank(rank, rng)
    share_rate = estimate_share_rate(rank, rng)

    return TrafficData(
        reach=f"~{format_number(estimate.reach)}",
        unique_visitors=f"~{format_number(estimate.visitors)}/month",
        page_views=f"~{format_number(estimate.page_views)}/month",
        share_rate=format_percent(share_rate),
        source=DataSource.ESTIMATED,
    )


def build_ranked_traffic(
    rank: Optional[int], bucket: str, rng: RandomSource = random
) -> TrafficData:
    """Traffic figures derived from a Radar rank, or the bucket midpoint."""
    effective_rank = rank if rank is not None else bucket_to_rank(bucket)
    estimate = estimate_traffic_from_rank(effective_rank, rng)
    share_rate = estimate_share_rate(effective_rank, rng)

    return TrafficData(
        reach=format_number(estimate.reach),
        unique_visitors=f"{format_number(estimate.visitors)}/month",
        page_views=f"{format_number(estimate.page_views)}/month",
        share_rate=format_percent(share_rate),
        rank=rank,
        bucket=f"Top {bucket}" if bucket else None,
        source=DataSource.EXACT,
    )


class TrafficResolver:
    """Resolves traffic data for a URL from Radar, falling back to estimates."""

    def __init__(self, radar: Optional[RadarClient], rng: RandomSource = random):
        self.radar = radar
        self.rng = rng

    def get_traffic_data(self, url: str) -> TrafficData:
        if self.radar is None or not self.radar.credentials.has_token:
            logger.warning("CLOUDFLARE_API_TOKEN not set, using estimates")
            return build_estimated_traffic(url, self.rng)

        hostname = normalize_hostname(url)
        try:
            ranking = self.radar.get_domain_ranking(hostname)
        except Exception as e:
            logger.error(f"Error fetching Radar data for {hostname}: {str(e)}")
            ranking = None

        if ranking is None:
            # Domain not in Radar's ranking
            return build_estimated_traffic(url, self.rng)

        return build_ranked_traffic(ranking.rank, ranking.bucket, self.rng)
