"""FastAPI application for FarmPro report generation and downloads."""

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse
from typing import Optional
import logging
import io
from datetime import datetime, timezone

from .models import (
    GenerateReportResponse,
    HealthCheckResponse,
    ReportGenerateRequest,
    ReportListResponse,
    ReportStatsResponse,
)
from .aggregator import AggregationError, ReportAggregator
from .config import Config
from .database import DatabaseManager
from .pdf_report import RenderError
from .report_service import DEFAULT_PAGE_SIZE, ReportNotFoundError, ReportService

# Configure logging
logging.basicConfig(
    level=getattr(logging, Config.LOG_LEVEL),
    format=Config.LOG_FORMAT
)

logger = logging.getLogger(__name__)


# Create FastAPI app
app = FastAPI(
    title="FarmPro Reports API",
    description="Farm report generation with PDF, CSV and JSON exports",
    version="0.1.0",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=Config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialize database
db_manager = DatabaseManager(Config.DATABASE_PATH)


def get_report_service() -> ReportService:
    """Report service bound to the current database manager."""
    aggregator = ReportAggregator(
        db_manager,
        timeout=Config.REPORT_QUERY_TIMEOUT,
        record_limit=Config.REPORT_RECORD_LIMIT,
    )
    return ReportService(db_manager, aggregator=aggregator, tz_name=Config.APP_TIMEZONE)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "FarmPro Reports API",
        "version": "0.1.0",
        "endpoints": {
            "reports": "GET /api/reports",
            "stats": "GET /api/reports/stats",
            "generate": "POST /api/reports/generate",
            "download": "GET /api/reports/{id}/download",
            "health": "GET /health",
        }
    }


@app.get("/health", response_model=HealthCheckResponse)
async def health_check():
    """Health check endpoint."""
    config_valid = Config.validate_config()

    # Test database connection
    db_connected = False
    table_counts = None
    try:
        table_counts = db_manager.get_table_counts()
        db_connected = True
    except Exception as e:
        logger.error(f"Database health check failed: {e}")

    return HealthCheckResponse(
        status="healthy" if (config_valid and db_connected) else "degraded",
        timestamp=datetime.now(timezone.utc).isoformat(),
        database_connected=db_connected,
        config_valid=config_valid,
        table_counts=table_counts,
    )


@app.get("/api/reports", response_model=ReportListResponse)
async def list_reports(
    page: int = Query(default=1, description="1-based page number"),
    pageSize: int = Query(default=DEFAULT_PAGE_SIZE, description="Items per page, clamped to 1..100"),
):
    """
    List generated reports, most recent first.

    Args:
        page: Page number (values below 1 read as 1)
        pageSize: Page size (clamped to 1..100)

    Returns:
        Paginated report listing
    """
    try:
        listing = get_report_service().list_reports(page, pageSize)
    except Exception as e:
        logger.error(f"Failed to list reports: {e}")
        raise HTTPException(status_code=500, detail="failed to list reports")

    return listing


@app.get("/api/reports/stats", response_model=ReportStatsResponse)
async def report_stats():
    """Current-month revenue, VAT, profit and herd figures."""
    try:
        return get_report_service().monthly_stats()
    except AggregationError as e:
        logger.error(f"Failed to compute report stats: {e}")
        raise HTTPException(status_code=500, detail="failed to compute report stats")


@app.post("/api/reports/generate", response_model=GenerateReportResponse, status_code=201)
async def generate_report(body: ReportGenerateRequest):
    """
    Store a report request.

    The report content itself is aggregated on download, so a report
    always reflects the data at the time it is fetched.
    """
    try:
        report = get_report_service().create_report(
            date_range=body.dateRange,
            report_type=body.reportType,
            fmt=body.format,
            title=body.title,
        )
    except Exception as e:
        logger.error(f"Failed to create report: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="failed to create report")

    return {"ok": True, "report": report}


@app.get("/api/reports/{report_id}/download")
async def download_report(
    report_id: int,
    format: Optional[str] = Query(default=None, description="PDF, CSV or JSON. Default: the stored format."),
):
    """
    Download a report, aggregated now, in the requested format.

    Args:
        report_id: Stored report ID
        format: Optional format override

    Returns:
        File download
    """
    if report_id <= 0:
        raise HTTPException(status_code=400, detail="invalid report id")

    try:
        rendered = get_report_service().download(report_id, requested_format=format)
    except ReportNotFoundError:
        raise HTTPException(status_code=404, detail="report not found")
    except AggregationError as e:
        logger.error(f"Failed to build report {report_id}: {e}")
        raise HTTPException(status_code=500, detail="failed to build report")
    except RenderError as e:
        logger.error(f"Failed to render report {report_id}: {e}")
        raise HTTPException(status_code=500, detail=f"failed to write {e.format} report")

    return StreamingResponse(
        io.BytesIO(rendered.body),
        media_type=rendered.media_type,
        headers={"Content-Disposition": f'attachment; filename="{rendered.filename}"'},
    )
