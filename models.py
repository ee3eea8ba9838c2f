# models.py
"""
Record types stored in the pharmacy documents.

Reading is lenient: a record written by another client with missing keys,
extra keys or non-string values is still displayed, with blanks where fields
are absent.  Each record read from the store keeps the dict it came from, and
writes it back untouched unless the record was edited; an edited record keeps
the keys it does not know about.
"""
import copy
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class Medicine:
    name: str = ""
    id: str = ""
    quantity: str = ""          # digits only, kept as text
    usage: Optional[str] = ""    # None when the stored record has no such key
    side_effects: Optional[str] = ""
    stored: Optional[dict] = field(default=None, compare=False, repr=False)

    @classmethod
    def from_dict(cls, data):
        data = data or {}
        return cls(
            name=_text(data.get('name')),
            id=_text(data.get('id')),
            quantity=_text(data.get('quantity')),
            usage=_optional_text(data, 'usage'),
            side_effects=_optional_text(data, 'sideEffects'),
            stored=copy.deepcopy(data),
        )

    def to_dict(self):
        data = {
            'name': self.name,
            'id': self.id,
            'quantity': self.quantity,
            'usage': self.usage,
            'sideEffects': self.side_effects,
        }
        return _merge_stored(self, data)

    def replacing(self, previous):
        """This record as an edit of ``previous``, keeping its unknown keys."""
        return replace(self, stored=previous.stored)

    @property
    def units(self):
        """Stock count, or None when the quantity is not a countable number."""
        if not self.quantity.isdecimal():
            return None
        try:
            return int(self.quantity)
        except ValueError:
            # longer than the interpreter's int/str conversion limit
            return None


@dataclass(frozen=True)
class Order:
    order_id: int
    order_date: date
    medicine_name: str
    quantity: int
    unit_price: float
    total_revenue: float
    stored: Optional[dict] = field(default=None, compare=False, repr=False)

    @classmethod
    def from_dict(cls, data):
        raw_date = data.get('orderDate')
        try:
            order_date = date.fromisoformat(raw_date) if raw_date else None
        except (TypeError, ValueError):
            order_date = None
        return cls(
            order_id=_number(int, data.get('orderId')),
            order_date=order_date,
            medicine_name=_text(data.get('medicineName')),
            quantity=_number(int, data.get('quantity')),
            unit_price=_number(float, data.get('unitPrice')),
            total_revenue=_number(float, data.get('totalRevenue')),
            stored=copy.deepcopy(data),
        )

    def to_dict(self):
        data = {
            'orderId': self.order_id,
            'orderDate': self.order_date.isoformat() if self.order_date else None,
            'medicineName': self.medicine_name,
            'quantity': self.quantity,
            'unitPrice': self.unit_price,
            'totalRevenue': self.total_revenue,
        }
        return _merge_stored(self, data)


def _merge_stored(record, data):
    if record.stored is None:
        return {k: v for k, v in data.items() if v is not None}
    if type(record).from_dict(record.stored) == record:
        return copy.deepcopy(record.stored)
    merged = copy.deepcopy(record.stored)
    for key, value in data.items():
        if value is not None:
            merged[key] = value
    return merged


def _text(value):
    if value is None:
        return ""
    try:
        return str(value)
    except ValueError:
        # int past the conversion limit
        return ""


def _optional_text(data, key):
    return _text(data[key]) if key in data else None


def _number(kind, value):
    try:
        return kind(value)
    except (TypeError, ValueError, OverflowError):
        return kind(0)
