from enum import Enum
from typing import Any, List, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field


NOT_AVAILABLE = "N/A"


class DataSource(str, Enum):
    EXACT = "exact"  # Cloudflare Radar ranking
    ESTIMATED = "estimated"  # TLD / domain-length heuristic


# Models
class SentimentResult(BaseModel):
    score: Union[int, float] = 0
    label: Literal["Positive", "Neutral", "Negative"] = "Neutral"
    comparative: float = 0


class TrafficData(BaseModel):
    reach: str
    unique_visitors: str
    page_views: str
    share_rate: str
    rank: Optional[int] = None
    bucket: Optional[str] = None
    source: DataSource


class AnalysisResult(BaseModel):
    """Per-URL analysis result. Serialized with camelCase keys."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    url: str
    reach: str = NOT_AVAILABLE
    unique_visitors: str = Field(default=NOT_AVAILABLE, alias="uniqueVisitors")
    page_views: str = Field(default=NOT_AVAILABLE, alias="pageViews")
    share_rate: str = Field(default=NOT_AVAILABLE, alias="shareRate")
    rank: Optional[int] = None
    bucket: Optional[str] = None
    data_source: Optional[DataSource] = Field(default=None, alias="dataSource")
    screenshot_url: Optional[str] = Field(default=None, alias="screenshotUrl")
    sentiment: SentimentResult = Field(default_factory=SentimentResult)
    analyzed_at: str = Field(alias="analyzedAt")
    error: Optional[str] = None


class AnalyzeRequest(BaseModel):
    urls: Optional[List[Any]] = None


class AnalyzeResponse(BaseModel):
    results: List[AnalysisResult]


class ExportRequest(BaseModel):
    results: Optional[List[AnalysisResult]] = None
