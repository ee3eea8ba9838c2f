# sales.py
"""
Sales orders, kept the same way as the medicine list: one ``orders`` array in
the ``sales`` document, rewritten whole on every new order.

Orders are append-only.  Recording an order does not touch medicine stock.
"""
import logging
import math
from collections import defaultdict
from datetime import date

import config
from models import Order
from synchronizer import ListSynchronizer
from validation import ValidationError, DIGITS_ONLY

logger = logging.getLogger(__name__)

# orders are stored as BSON int64
MAX_QUANTITY = 2 ** 63 - 1


def validate_order(medicine_name, quantity, unit_price):
    """Normalise raw order input to (name, int quantity, float price)."""
    medicine_name = (medicine_name or "").strip()
    if not medicine_name:
        raise ValidationError('medicine_name', 'required', "Medicine cannot be empty")

    if isinstance(quantity, str):
        quantity = quantity.strip()
        if not quantity:
            raise ValidationError('quantity', 'required', "Quantity cannot be empty")
        if not DIGITS_ONLY.fullmatch(quantity):
            raise ValidationError('quantity', 'numeric', "Quantity must be numeric")
        if len(quantity.lstrip('0')) > len(str(MAX_QUANTITY)):
            raise ValidationError('quantity', 'max', "Quantity is too large")
        quantity = int(quantity)
    if quantity > MAX_QUANTITY:
        raise ValidationError('quantity', 'max', "Quantity is too large")
    if quantity <= 0:
        raise ValidationError('quantity', 'positive', "Quantity must be greater than zero")

    try:
        unit_price = float(unit_price)
    except (TypeError, ValueError):
        raise ValidationError('unit_price', 'numeric', "Unit price must be a number")
    if math.isnan(unit_price) or math.isinf(unit_price) or unit_price < 0:
        raise ValidationError('unit_price', 'non_negative', "Unit price must be zero or more")

    return medicine_name, quantity, unit_price


def order_total(quantity, unit_price):
    try:
        total = round(quantity * unit_price, 2)
    except OverflowError:
        total = math.inf
    if math.isinf(total):
        raise ValidationError('unit_price', 'max', "Order total is too large")
    return total


class SalesRecorder:

    def __init__(self, store, doc_id=config.SALES_DOC, field=config.SALES_FIELD):
        self.synchronizer = ListSynchronizer(store, doc_id, field, Order)

    @property
    def orders(self):
        return self.synchronizer.items

    def load(self):
        return self.synchronizer.load()

    def next_order_id(self):
        return max((o.order_id for o in self.synchronizer.items), default=0) + 1

    def record(self, medicine_name, quantity, unit_price, order_date=None):
        medicine_name, quantity, unit_price = validate_order(medicine_name, quantity, unit_price)
        total = order_total(quantity, unit_price)
        order = Order(
            order_id=self.next_order_id(),
            order_date=order_date or date.today(),
            medicine_name=medicine_name,
            quantity=quantity,
            unit_price=unit_price,
            total_revenue=total,
        )
        self.synchronizer.add(order)
        logger.info("Recorded order #%d: %d x %s", order.order_id, quantity, medicine_name)
        return order

    def summary(self):
        orders = self.synchronizer.items
        by_medicine = defaultdict(float)
        for o in orders:
            by_medicine[o.medicine_name] += o.total_revenue
        return {
            'order_count': len(orders),
            'units_sold': sum(o.quantity for o in orders),
            'total_revenue': round(sum(o.total_revenue for o in orders), 2),
            'revenue_by_medicine': {name: round(total, 2) for name, total in sorted(by_medicine.items())},
        }
