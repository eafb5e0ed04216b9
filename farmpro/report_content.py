"""Report rows, aggregated report content and the per-category record variants."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Union

from .formatting import format_currency, format_number, plain_value
from .report_types import Category, DateRange, ReportFormat


@dataclass(frozen=True)
class ReportRecord:
    """A stored report request, as read from the ``reports`` table."""

    id: int
    title: str
    description: str
    category: str
    last_generated: Optional[date] = None


@dataclass(frozen=True)
class FinancialRecord:
    """One entry of the merged sales/expenses feed. Expenses carry a negative amount."""

    date: str
    type: str
    item: str
    amount: float

    def display_columns(self) -> List[str]:
        return [self.date, self.type.strip().capitalize(), self.item, format_currency(self.amount)]

    def to_dict(self) -> Dict[str, Any]:
        return {"date": self.date, "type": self.type, "item": self.item, "amount": self.amount}


@dataclass(frozen=True)
class HealthRecord:
    date: str
    animal_tag_id: str
    action: str
    treatment: str
    veterinarian: str

    def display_columns(self) -> List[str]:
        return [self.date, self.animal_tag_id, self.action, self.treatment, self.veterinarian]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "animalTagId": self.animal_tag_id,
            "action": self.action,
            "treatment": self.treatment,
            "veterinarian": self.veterinarian,
        }


@dataclass(frozen=True)
class ResourcesRecord:
    """One day of production."""

    date: str
    milk_liters: float
    eggs_count: int
    wool_kg: float
    total_value: float

    def display_columns(self) -> List[str]:
        return [
            self.date,
            format_number(self.milk_liters),
            format_number(self.eggs_count),
            format_number(self.wool_kg),
            format_currency(self.total_value),
        ]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "milkLiters": self.milk_liters,
            "eggsCount": self.eggs_count,
            "woolKg": self.wool_kg,
            "totalValue": self.total_value,
        }


@dataclass(frozen=True)
class SalesRecord:
    date: str
    product: str
    quantity_value: float
    quantity_unit: str
    buyer: str
    buyer_pin: str
    vat_applicable: bool
    vat_rate: float
    vat_amount: float
    net_amount: float
    price_per_unit: float
    total_amount: float

    def display_columns(self) -> List[str]:
        quantity = f"{format_number(self.quantity_value)} {plain_value(self.quantity_unit)}".strip()
        return [self.date, self.product, quantity, self.buyer, format_currency(self.total_amount)]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "product": self.product,
            "quantityValue": self.quantity_value,
            "quantityUnit": self.quantity_unit,
            "buyer": self.buyer,
            "buyerPIN": self.buyer_pin,
            "vatApplicable": self.vat_applicable,
            "vatRate": self.vat_rate,
            "vatAmount": self.vat_amount,
            "netAmount": self.net_amount,
            "pricePerUnit": self.price_per_unit,
            "totalAmount": self.total_amount,
        }


ReportRow = Union[FinancialRecord, HealthRecord, ResourcesRecord, SalesRecord]


@dataclass
class ReportContent:
    """Aggregated, ready-to-export report. Built fresh for every download."""

    id: int
    title: str
    category: Category
    date_range: DateRange
    format: ReportFormat
    generated_on: str
    summary: Dict[str, Any] = field(default_factory=dict)
    records: List[ReportRow] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Serializable view with the stable JSON field names."""
        return {
            "id": self.id,
            "title": self.title,
            "category": self.category.value,
            "dateRange": self.date_range.value,
            "format": self.format.value,
            "generatedOn": self.generated_on,
            "summary": dict(self.summary),
            "records": [record.to_dict() for record in self.records],
        }
