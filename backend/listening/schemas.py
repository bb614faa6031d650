# listening/schemas.py
from pydantic import BaseModel, Field
from typing import Optional


class ReportInputs(BaseModel):
    brand_or_product: Optional[str] = None        # required, validated by the handler
    competitors: Optional[str] = None             # comma-separated
    time_range: Optional[str] = None              # e.g. "24 hours", "7 days", "30 days"
    platforms: Optional[str] = None               # "all" or e.g. "LinkedIn, G2"


class ReportRequest(BaseModel):
    inputs: ReportInputs = Field(default_factory=ReportInputs)


class ReportOutputs(BaseModel):
    sentiment_summary: str
    positive_highlights: str
    negative_concerns: str
    trending_topics: str
    competitive_insights: str
    full_report: str
    has_critical_issues: str                      # "true" | "false"
    report_timestamp: str                         # ISO-8601


class ReportResponse(BaseModel):
    outputs: ReportOutputs


class ErrorResponse(BaseModel):
    error: str
