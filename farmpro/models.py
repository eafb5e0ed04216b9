"""Pydantic models for request/response validation."""

from pydantic import BaseModel, Field
from typing import Dict, List, Optional, Any


class ReportGenerateRequest(BaseModel):
    """Request model for generating a report. Unrecognised values fall back to defaults."""
    dateRange: Optional[str] = Field(default=None, description="Last 7 days, Last 30 days or This month")
    reportType: Optional[str] = Field(default=None, description="Financial, Health, Resources or Sales")
    format: Optional[str] = Field(default=None, description="PDF, CSV or JSON")
    title: Optional[str] = Field(default=None, max_length=200)


class GeneratedReport(BaseModel):
    """Model for a newly stored report."""
    id: int
    title: str
    description: str
    category: str
    format: str


class GenerateReportResponse(BaseModel):
    """Response model for report generation."""
    ok: bool
    report: GeneratedReport


class ReportListItem(BaseModel):
    """Model for one row of the report listing."""
    id: int
    title: str
    detail: str
    category: str
    dateRange: str
    format: str
    generated: str  # e.g. "05 March 2026"


class ReportListResponse(BaseModel):
    """Response model for the paginated report listing."""
    items: List[ReportListItem]
    page: int
    pageSize: int
    total: int


class ReportStatsResponse(BaseModel):
    """Current-month dashboard figures."""
    grossRevenue: float
    netRevenue: float
    vatCollected: float
    monthlyProfit: float
    totalAnimals: int
    operatingCosts: float
    productivityRate: int


class HealthCheckResponse(BaseModel):
    """Health check response."""
    status: str
    timestamp: str
    database_connected: bool
    config_valid: bool
    table_counts: Optional[Dict[str, Any]] = None
