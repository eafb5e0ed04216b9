"""Database manager for the FarmPro reporting service."""

import sqlite3
import time
from contextlib import contextmanager
from datetime import date
from typing import Any, Dict, List, Optional

from .report_content import ReportRecord


class DatabaseManager:
    """Manages SQLite database operations for farm records and generated reports."""

    # Number of SQLite VM instructions between deadline checks on read connections
    PROGRESS_STEPS = 1000

    def __init__(self, db_path: str = "farmpro.db"):
        """
        Initialize database manager.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = db_path
        self.initialize_database()

    @contextmanager
    def get_connection(self):
        """Context manager for database connections."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    @contextmanager
    def get_read_connection(self, timeout: float):
        """
        Context manager for a read-only connection bounded by ``timeout`` seconds.

        The timeout covers both waiting on locks and statement execution:
        once the deadline passes, the running statement is interrupted and
        raises ``sqlite3.OperationalError``.
        """
        deadline = time.monotonic() + timeout
        conn = sqlite3.connect(self.db_path, timeout=timeout)
        conn.row_factory = sqlite3.Row
        conn.set_progress_handler(lambda: int(time.monotonic() > deadline), self.PROGRESS_STEPS)
        try:
            conn.execute("PRAGMA query_only = ON")
            yield conn
        finally:
            conn.close()

    def initialize_database(self):
        """Create database schema if it doesn't exist."""
        with self.get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS animals (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    tag_id TEXT NOT NULL UNIQUE,
                    type TEXT NOT NULL,
                    breed TEXT NOT NULL,
                    health_status TEXT NOT NULL DEFAULT 'healthy'
                        CHECK(health_status IN ('healthy', 'attention', 'sick')),
                    is_active BOOLEAN NOT NULL DEFAULT 1,
                    created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS health_records (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    animal_id INTEGER NOT NULL,
                    action TEXT NOT NULL,
                    treatment TEXT NOT NULL,
                    record_date TEXT NOT NULL,
                    veterinarian TEXT NOT NULL,
                    FOREIGN KEY(animal_id) REFERENCES animals(id) ON DELETE CASCADE
                )
            """)

            # One production log per day
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS production_logs (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    log_date TEXT NOT NULL UNIQUE,
                    milk_liters REAL NOT NULL DEFAULT 0,
                    eggs_count INTEGER NOT NULL DEFAULT 0,
                    wool_kg REAL NOT NULL DEFAULT 0,
                    total_value REAL NOT NULL DEFAULT 0
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS expenses (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    expense_date TEXT NOT NULL,
                    category TEXT NOT NULL,
                    item TEXT NOT NULL,
                    vendor TEXT NOT NULL,
                    amount REAL NOT NULL
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS sales (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    sale_date TEXT NOT NULL,
                    product TEXT NOT NULL,
                    quantity_value REAL NOT NULL,
                    quantity_unit TEXT NOT NULL,
                    buyer TEXT NOT NULL,
                    buyer_pin TEXT NOT NULL DEFAULT '',
                    vat_applicable BOOLEAN NOT NULL DEFAULT 0,
                    vat_rate REAL NOT NULL DEFAULT 0,
                    vat_amount REAL NOT NULL DEFAULT 0,
                    net_amount REAL NOT NULL DEFAULT 0,
                    price_per_unit REAL NOT NULL,
                    total_amount REAL NOT NULL
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS reports (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    title TEXT NOT NULL,
                    description TEXT NOT NULL,
                    category TEXT NOT NULL,
                    last_generated TEXT NOT NULL,
                    created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
                )
            """)

            # Create indexes for the report window queries
            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_animals_health
                ON animals(is_active, health_status)
            """)
            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_health_record_date
                ON health_records(record_date)
            """)
            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_expense_date
                ON expenses(expense_date)
            """)
            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_sale_date
                ON sales(sale_date)
            """)
            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_reports_generated
                ON reports(last_generated DESC, id DESC)
            """)

    @staticmethod
    def _iso(value: Any) -> str:
        """Store dates as ISO text so BETWEEN comparisons stay lexicographic."""
        if isinstance(value, date):
            return value.isoformat()
        return str(value)

    # ─── Farm Data ──────────────────────────────────────────────────────

    def insert_animal(
        self,
        tag_id: str,
        animal_type: str = "cattle",
        breed: str = "Friesian",
        health_status: str = "healthy",
        is_active: bool = True,
    ) -> int:
        """Insert an animal and return its ID."""
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                INSERT INTO animals (tag_id, type, breed, health_status, is_active)
                VALUES (?, ?, ?, ?, ?)
            """, (tag_id, animal_type, breed, health_status, is_active))
            return cursor.lastrowid

    def insert_health_record(
        self,
        animal_id: int,
        record_date: Any,
        action: str,
        treatment: str,
        veterinarian: str,
    ) -> int:
        """Insert a health record and return its ID."""
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                INSERT INTO health_records (animal_id, action, treatment, record_date, veterinarian)
                VALUES (?, ?, ?, ?, ?)
            """, (animal_id, action, treatment, self._iso(record_date), veterinarian))
            return cursor.lastrowid

    def insert_production_log(
        self,
        log_date: Any,
        milk_liters: float = 0.0,
        eggs_count: int = 0,
        wool_kg: float = 0.0,
        total_value: float = 0.0,
    ) -> int:
        """Insert a daily production log and return its ID."""
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                INSERT INTO production_logs (log_date, milk_liters, eggs_count, wool_kg, total_value)
                VALUES (?, ?, ?, ?, ?)
            """, (self._iso(log_date), milk_liters, eggs_count, wool_kg, total_value))
            return cursor.lastrowid

    def insert_expense(
        self,
        expense_date: Any,
        item: str,
        amount: float,
        category: str = "general",
        vendor: str = "",
    ) -> int:
        """Insert an expense and return its ID."""
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                INSERT INTO expenses (expense_date, category, item, vendor, amount)
                VALUES (?, ?, ?, ?, ?)
            """, (self._iso(expense_date), category, item, vendor, amount))
            return cursor.lastrowid

    def insert_sale(
        self,
        sale_date: Any,
        product: str,
        quantity_value: float,
        quantity_unit: str,
        buyer: str,
        price_per_unit: float,
        total_amount: Optional[float] = None,
        buyer_pin: str = "",
        vat_applicable: bool = False,
        vat_rate: float = 0.0,
    ) -> int:
        """
        Insert a sale and return its ID.

        VAT is treated as included in ``total_amount``; the VAT and net
        amounts are derived from it when ``vat_applicable`` is set.
        """
        if total_amount is None:
            total_amount = round(quantity_value * price_per_unit, 2)
        vat_amount = 0.0
        if vat_applicable and vat_rate > 0:
            vat_amount = round(total_amount * vat_rate / (100 + vat_rate), 2)
        net_amount = round(total_amount - vat_amount, 2)

        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                INSERT INTO sales (
                    sale_date, product, quantity_value, quantity_unit, buyer, buyer_pin,
                    vat_applicable, vat_rate, vat_amount, net_amount, price_per_unit, total_amount
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                self._iso(sale_date), product, quantity_value, quantity_unit, buyer, buyer_pin,
                vat_applicable, vat_rate, vat_amount, net_amount, price_per_unit, total_amount,
            ))
            return cursor.lastrowid

    # ─── Reports ────────────────────────────────────────────────────────

    def create_report(self, title: str, description: str, category: str, last_generated: Any) -> int:
        """
        Insert a generated-report request.

        Args:
            title: Report title
            description: Encoded description (date range + format)
            category: Normalized category name
            last_generated: Generation date

        Returns:
            ID of the new report row
        """
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                INSERT INTO reports (title, description, category, last_generated)
                VALUES (?, ?, ?, ?)
            """, (title, description, category, self._iso(last_generated)))
            return cursor.lastrowid

    def _to_report_record(self, row: sqlite3.Row) -> ReportRecord:
        last_generated = row["last_generated"]
        try:
            last_generated = date.fromisoformat(str(last_generated)[:10])
        except ValueError:
            last_generated = None
        return ReportRecord(
            id=row["id"],
            title=row["title"],
            description=row["description"],
            category=row["category"],
            last_generated=last_generated,
        )

    def get_report(self, report_id: int) -> Optional[ReportRecord]:
        """
        Get a stored report by ID.

        Returns:
            ReportRecord, or None if not found
        """
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                SELECT id, title, description, category, last_generated
                FROM reports
                WHERE id = ?
            """, (report_id,))
            row = cursor.fetchone()
            if not row:
                return None
            return self._to_report_record(row)

    def get_reports(self, limit: int = 10, offset: int = 0) -> List[ReportRecord]:
        """Get stored reports, most recently generated first."""
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                SELECT id, title, description, category, last_generated
                FROM reports
                ORDER BY last_generated DESC, id DESC
                LIMIT ? OFFSET ?
            """, (limit, offset))
            return [self._to_report_record(row) for row in cursor.fetchall()]

    def count_reports(self) -> int:
        """Total number of stored reports."""
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT COUNT(*) FROM reports")
            return cursor.fetchone()[0]

    def get_table_counts(self) -> Dict[str, int]:
        """Row counts per table, used by the health check."""
        counts = {}
        with self.get_connection() as conn:
            cursor = conn.cursor()
            for table in ("animals", "health_records", "production_logs", "expenses", "sales", "reports"):
                cursor.execute(f"SELECT COUNT(*) FROM {table}")
                counts[table] = cursor.fetchone()[0]
        return counts
