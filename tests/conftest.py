"""Shared test fixtures for the FarmPro reports test suite."""

from datetime import date, datetime
from zoneinfo import ZoneInfo

import pytest

from farmpro.aggregator import ReportAggregator
from farmpro.database import DatabaseManager
from farmpro.report_content import (
    FinancialRecord,
    HealthRecord,
    ReportContent,
    ResourcesRecord,
    SalesRecord,
)
from farmpro.report_service import ReportService
from farmpro.report_types import Category, DateRange, ReportFormat


TEST_TIMEZONE = "Africa/Nairobi"


# ─── Clock Fixtures ───


@pytest.fixture
def fixed_now():
    """Fixed server clock: 15 March 2026, 10:00 in Nairobi."""
    return datetime(2026, 3, 15, 10, 0, tzinfo=ZoneInfo(TEST_TIMEZONE))


# ─── Database Fixtures ───


@pytest.fixture
def tmp_db_path(tmp_path):
    """Return a temporary database file path."""
    return str(tmp_path / "test_farmpro.db")


@pytest.fixture
def db_manager(tmp_db_path):
    """Create a fresh DatabaseManager with a temp database."""
    return DatabaseManager(tmp_db_path)


@pytest.fixture
def seeded_db(db_manager):
    """
    Database with a small farm history around 15 March 2026.

    Inside the last 7 days (9-15 March): two sales (100 and 50), one
    expense (30), two health records and three production logs. A sale
    and an expense on 1 March fall inside "This month" only; a sale on
    20 February falls inside "Last 30 days" only.
    """
    cow = db_manager.insert_animal("KE-001", "cattle", "Friesian", "healthy")
    goat = db_manager.insert_animal("KE-002", "goat", "Galla", "attention")
    db_manager.insert_animal("KE-003", "sheep", "Dorper", "sick")
    db_manager.insert_animal("KE-004", "cattle", "Ayrshire", "healthy")
    db_manager.insert_animal("KE-005", "cattle", "Jersey", "sick", is_active=False)

    db_manager.insert_sale(date(2026, 3, 14), "Milk", 50, "liters", "Brookside", 2)
    db_manager.insert_sale(date(2026, 3, 15), "Eggs", 10, "trays", "Naivas", 5)
    db_manager.insert_expense(date(2026, 3, 13), "Dairy meal", 30, category="feed", vendor="Unga")
    db_manager.insert_sale(date(2026, 3, 1), "Heifer", 1, "head", "Kamau", 300)
    db_manager.insert_expense(date(2026, 3, 1), "Vet visit", 80, category="health")
    db_manager.insert_sale(date(2026, 2, 20), "Wool", 4, "kg", "Kamau", 25)

    db_manager.insert_health_record(cow, date(2026, 3, 10), "Vaccination", "FMD vaccine", "Dr. Otieno")
    db_manager.insert_health_record(goat, date(2026, 3, 12), "Deworming", "Albendazole", "Dr. Wanjiru")
    db_manager.insert_health_record(cow, date(2026, 2, 1), "Checkup", "None", "Dr. Otieno")

    db_manager.insert_production_log(date(2026, 3, 13), milk_liters=40, eggs_count=30, wool_kg=0, total_value=1900)
    db_manager.insert_production_log(date(2026, 3, 14), milk_liters=42.5, eggs_count=28, wool_kg=1.5, total_value=2100.75)
    db_manager.insert_production_log(date(2026, 3, 15), milk_liters=38, eggs_count=31, wool_kg=0, total_value=1800)
    db_manager.insert_production_log(date(2026, 3, 2), milk_liters=35, eggs_count=25, wool_kg=0, total_value=1500)

    return db_manager


@pytest.fixture
def aggregator(seeded_db):
    return ReportAggregator(seeded_db, timeout=5.0, record_limit=250)


@pytest.fixture
def report_service(seeded_db, aggregator):
    return ReportService(seeded_db, aggregator=aggregator, tz_name=TEST_TIMEZONE)


# ─── Report Content Factories ───


@pytest.fixture
def make_report():
    """Factory for ReportContent with sensible defaults."""

    def _make(category=Category.FINANCIAL, records=None, summary=None, fmt=ReportFormat.JSON, **overrides):
        fields = {
            "id": 7,
            "title": "Weekly Finance",
            "category": category,
            "date_range": DateRange.LAST_7_DAYS,
            "format": fmt,
            "generated_on": "2026-03-15",
            "summary": summary if summary is not None else {},
            "records": records if records is not None else [],
        }
        fields.update(overrides)
        return ReportContent(**fields)

    return _make


@pytest.fixture
def financial_records():
    return [
        FinancialRecord(date="2026-03-15", type="sale", item="Eggs", amount=50.0),
        FinancialRecord(date="2026-03-14", type="sale", item="Milk", amount=100.0),
        FinancialRecord(date="2026-03-13", type="expense", item="Dairy meal", amount=-30.0),
    ]


@pytest.fixture
def sales_record():
    return SalesRecord(
        date="2026-03-14",
        product="Milk",
        quantity_value=50.0,
        quantity_unit="liters",
        buyer="Brookside",
        buyer_pin="P051234567X",
        vat_applicable=True,
        vat_rate=16.0,
        vat_amount=13.79,
        net_amount=86.21,
        price_per_unit=2.0,
        total_amount=100.0,
    )


@pytest.fixture
def health_record():
    return HealthRecord(
        date="2026-03-10",
        animal_tag_id="KE-001",
        action="Vaccination",
        treatment="FMD vaccine",
        veterinarian="Dr. Otieno",
    )


@pytest.fixture
def resources_record():
    return ResourcesRecord(date="2026-03-14", milk_liters=42.5, eggs_count=28, wool_kg=1.5, total_value=2100.75)
