"""Category-specific aggregation of farm data into report summaries and records."""

import logging
import sqlite3
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List

from .database import DatabaseManager
from .date_ranges import format_iso_date
from .formatting import round_half_away
from .report_content import (
    FinancialRecord,
    HealthRecord,
    ReportRow,
    ResourcesRecord,
    SalesRecord,
)
from .report_types import Category

logger = logging.getLogger(__name__)


class AggregationError(Exception):
    """A report query failed or timed out; no partial report is produced."""


@dataclass
class AggregationResult:
    summary: Dict[str, Any] = field(default_factory=dict)
    records: List[ReportRow] = field(default_factory=list)


class ReportAggregator:
    """Runs the aggregate and row-level queries behind each report category."""

    def __init__(self, db_manager: DatabaseManager, timeout: float = 5.0, record_limit: int = 250):
        self.db_manager = db_manager
        self.timeout = timeout
        self.record_limit = record_limit

    def aggregate(self, category: Any, start: date, end: date) -> AggregationResult:
        """
        Build the summary metrics and newest-first record list for a category.

        Args:
            category: Report category (unrecognised values aggregate as Financial)
            start: First day of the window, inclusive
            end: Last day of the window, inclusive

        Returns:
            AggregationResult with summary and records

        Raises:
            AggregationError: if any query fails or the timeout elapses
        """
        category = Category.normalize(category)
        builders = {
            Category.HEALTH: self._aggregate_health,
            Category.RESOURCES: self._aggregate_resources,
            Category.SALES: self._aggregate_sales,
            Category.FINANCIAL: self._aggregate_financial,
        }
        window = (start.isoformat(), end.isoformat())

        try:
            with self.db_manager.get_read_connection(self.timeout) as conn:
                result = builders[category](conn.cursor(), window)
        except sqlite3.Error as e:
            raise AggregationError(f"{category.value} aggregation failed: {e}") from e

        logger.info(
            f"Aggregated {category.value} report for {window[0]}..{window[1]}: "
            f"{len(result.records)} records"
        )
        return result

    def _aggregate_financial(self, cursor: sqlite3.Cursor, window) -> AggregationResult:
        cursor.execute("""
            SELECT COALESCE(SUM(total_amount), 0), COALESCE(SUM(net_amount), 0), COALESCE(SUM(vat_amount), 0)
            FROM sales
            WHERE sale_date BETWEEN ? AND ?
        """, window)
        gross_revenue, net_revenue, vat_collected = cursor.fetchone()

        cursor.execute("""
            SELECT COALESCE(SUM(amount), 0)
            FROM expenses
            WHERE expense_date BETWEEN ? AND ?
        """, window)
        expenses = cursor.fetchone()[0]

        summary = {
            "totalRevenue": gross_revenue,
            "grossRevenue": gross_revenue,
            "netRevenue": net_revenue,
            "vatCollected": vat_collected,
            "totalExpenses": expenses,
            "profit": net_revenue - expenses,
        }

        cursor.execute("""
            SELECT entry_date, entry_type, item, amount
            FROM (
                SELECT id AS entry_id, sale_date AS entry_date, 'sale' AS entry_type,
                       product AS item, total_amount AS amount
                FROM sales
                WHERE sale_date BETWEEN ?1 AND ?2
                UNION ALL
                SELECT id AS entry_id, expense_date AS entry_date, 'expense' AS entry_type,
                       item, amount * -1 AS amount
                FROM expenses
                WHERE expense_date BETWEEN ?1 AND ?2
            )
            ORDER BY entry_date DESC, entry_id DESC
            LIMIT ?3
        """, (*window, self.record_limit))
        records = [
            FinancialRecord(
                date=format_iso_date(row["entry_date"]),
                type=row["entry_type"],
                item=row["item"],
                amount=row["amount"],
            )
            for row in cursor.fetchall()
        ]
        return AggregationResult(summary=summary, records=records)

    def _aggregate_health(self, cursor: sqlite3.Cursor, window) -> AggregationResult:
        # Herd health is a current snapshot, not windowed
        cursor.execute("""
            SELECT
                COALESCE(SUM(CASE WHEN health_status = 'healthy' THEN 1 ELSE 0 END), 0),
                COALESCE(SUM(CASE WHEN health_status = 'attention' THEN 1 ELSE 0 END), 0),
                COALESCE(SUM(CASE WHEN health_status = 'sick' THEN 1 ELSE 0 END), 0)
            FROM animals
            WHERE is_active = 1
        """)
        healthy, attention, sick = cursor.fetchone()
        summary = {"healthy": healthy, "attention": attention, "sick": sick}

        cursor.execute("""
            SELECT h.record_date, a.tag_id, h.action, h.treatment, h.veterinarian
            FROM health_records h
            JOIN animals a ON a.id = h.animal_id
            WHERE h.record_date BETWEEN ? AND ?
            ORDER BY h.record_date DESC, h.id DESC
            LIMIT ?
        """, (*window, self.record_limit))
        records = [
            HealthRecord(
                date=format_iso_date(row["record_date"]),
                animal_tag_id=row["tag_id"],
                action=row["action"],
                treatment=row["treatment"],
                veterinarian=row["veterinarian"],
            )
            for row in cursor.fetchall()
        ]
        return AggregationResult(summary=summary, records=records)

    def _aggregate_resources(self, cursor: sqlite3.Cursor, window) -> AggregationResult:
        cursor.execute("""
            SELECT COALESCE(SUM(milk_liters), 0), COALESCE(SUM(eggs_count), 0),
                   COALESCE(SUM(wool_kg), 0), COALESCE(SUM(total_value), 0)
            FROM production_logs
            WHERE log_date BETWEEN ? AND ?
        """, window)
        milk, eggs, wool, value = cursor.fetchone()
        summary = {"milkLiters": milk, "eggsCount": eggs, "woolKg": wool, "totalValue": value}

        cursor.execute("""
            SELECT log_date, milk_liters, eggs_count, wool_kg, total_value
            FROM production_logs
            WHERE log_date BETWEEN ? AND ?
            ORDER BY log_date DESC, id DESC
            LIMIT ?
        """, (*window, self.record_limit))
        records = [
            ResourcesRecord(
                date=format_iso_date(row["log_date"]),
                milk_liters=row["milk_liters"],
                eggs_count=row["eggs_count"],
                wool_kg=row["wool_kg"],
                total_value=row["total_value"],
            )
            for row in cursor.fetchall()
        ]
        return AggregationResult(summary=summary, records=records)

    def _aggregate_sales(self, cursor: sqlite3.Cursor, window) -> AggregationResult:
        cursor.execute("""
            SELECT COALESCE(SUM(total_amount), 0), COALESCE(SUM(net_amount), 0),
                   COALESCE(SUM(vat_amount), 0), COUNT(*)
            FROM sales
            WHERE sale_date BETWEEN ? AND ?
        """, window)
        gross_revenue, net_revenue, vat_collected, transactions = cursor.fetchone()
        summary = {
            "totalRevenue": gross_revenue,
            "grossRevenue": gross_revenue,
            "netRevenue": net_revenue,
            "vatCollected": vat_collected,
            "transactions": transactions,
        }

        cursor.execute("""
            SELECT sale_date, product, quantity_value, quantity_unit, buyer, buyer_pin,
                   vat_applicable, vat_rate, vat_amount, net_amount, price_per_unit, total_amount
            FROM sales
            WHERE sale_date BETWEEN ? AND ?
            ORDER BY sale_date DESC, id DESC
            LIMIT ?
        """, (*window, self.record_limit))
        records = [
            SalesRecord(
                date=format_iso_date(row["sale_date"]),
                product=row["product"],
                quantity_value=row["quantity_value"],
                quantity_unit=row["quantity_unit"],
                buyer=row["buyer"],
                buyer_pin=row["buyer_pin"],
                vat_applicable=bool(row["vat_applicable"]),
                vat_rate=row["vat_rate"],
                vat_amount=row["vat_amount"],
                net_amount=row["net_amount"],
                price_per_unit=row["price_per_unit"],
                total_amount=row["total_amount"],
            )
            for row in cursor.fetchall()
        ]
        return AggregationResult(summary=summary, records=records)

    def monthly_stats(self, today: date) -> Dict[str, Any]:
        """
        Current-month headline numbers for the reports dashboard.

        Args:
            today: Reference date in the server's timezone

        Returns:
            Dict with revenue, VAT, profit, operating costs, animal count and productivity

        Raises:
            AggregationError: if any query fails or the timeout elapses
        """
        window = (today.replace(day=1).isoformat(), today.isoformat())
        try:
            with self.db_manager.get_read_connection(self.timeout) as conn:
                cursor = conn.cursor()
                cursor.execute("""
                    SELECT COALESCE(SUM(total_amount), 0), COALESCE(SUM(net_amount), 0), COALESCE(SUM(vat_amount), 0)
                    FROM sales
                    WHERE sale_date BETWEEN ? AND ?
                """, window)
                gross_revenue, net_revenue, vat_collected = cursor.fetchone()
                cursor.execute("""
                    SELECT COALESCE(SUM(amount), 0) FROM expenses WHERE expense_date BETWEEN ? AND ?
                """, window)
                expenses = cursor.fetchone()[0]
                cursor.execute("SELECT COUNT(*) FROM animals WHERE is_active = 1")
                animals = cursor.fetchone()[0]
        except sqlite3.Error as e:
            raise AggregationError(f"Monthly stats failed: {e}") from e

        profit = net_revenue - expenses
        productivity = 0
        if net_revenue > 0:
            productivity = round_half_away(profit / net_revenue * 100)

        return {
            "grossRevenue": gross_revenue,
            "netRevenue": net_revenue,
            "vatCollected": vat_collected,
            "monthlyProfit": profit,
            "totalAnimals": animals,
            "operatingCosts": expenses,
            "productivityRate": productivity,
        }
