# tests/test_sales.py
from datetime import date

import pytest

from models import Order
from sales import SalesRecorder, order_total, validate_order
from validation import ValidationError
from conftest import RecordingStore, ASPIRIN


def recorder_over(documents=None):
    store = RecordingStore(documents)
    recorder = SalesRecorder(store)
    recorder.load()
    return recorder, store


def test_record_computes_total_and_first_id():
    recorder, store = recorder_over()

    order = recorder.record("Aspirin", "3", "2.50", order_date=date(2024, 5, 1))

    assert order == Order(1, date(2024, 5, 1), "Aspirin", 3, 2.5, 7.5)
    assert store.overwrites == [('sales', 'orders', [{
        'orderId': 1,
        'orderDate': '2024-05-01',
        'medicineName': 'Aspirin',
        'quantity': 3,
        'unitPrice': 2.5,
        'totalRevenue': 7.5,
    }])]


def test_orders_are_appended_with_increasing_ids():
    recorder, store = recorder_over()
    recorder.record("Aspirin", 1, 1.0)
    recorder.record("Bextra", 2, 4.0)

    assert [o.order_id for o in recorder.orders] == [1, 2]
    assert [o['medicineName'] for o in store.documents['sales']['orders']] == ['Aspirin', 'Bextra']
    assert len(store.overwrites) == 2


def test_ids_continue_after_highest_stored_id():
    recorder, _ = recorder_over({'sales': {'orders': [
        {'orderId': 3, 'orderDate': '2024-01-01', 'medicineName': 'A', 'quantity': 1, 'unitPrice': 1, 'totalRevenue': 1},
        {'orderId': 7, 'orderDate': '2024-01-02', 'medicineName': 'B', 'quantity': 1, 'unitPrice': 1, 'totalRevenue': 1},
    ]}})
    assert recorder.record("C", 1, 1).order_id == 8


def test_order_date_defaults_to_today():
    recorder, _ = recorder_over()
    assert recorder.record("Aspirin", 1, 1).order_date == date.today()


def test_recording_an_order_leaves_stock_alone():
    recorder, store = recorder_over({'medicine': {'medicines': [dict(ASPIRIN)]}})
    recorder.record("Aspirin", 5, 1.0)
    assert store.documents['medicine']['medicines'] == [ASPIRIN]


def test_total_is_rounded_to_cents():
    recorder, _ = recorder_over()
    assert recorder.record("Aspirin", 3, 0.1).total_revenue == 0.3


@pytest.mark.parametrize("name, quantity, price, field", [
    ("", "1", "1", "medicine_name"),
    ("   ", "1", "1", "medicine_name"),
    ("Aspirin", "", "1", "quantity"),
    ("Aspirin", "two", "1", "quantity"),
    ("Aspirin", "1.5", "1", "quantity"),
    ("Aspirin", "0", "1", "quantity"),
    ("Aspirin", 0, "1", "quantity"),
    ("Aspirin", "1", "", "unit_price"),
    ("Aspirin", "1", "abc", "unit_price"),
    ("Aspirin", "1", "-0.5", "unit_price"),
    ("Aspirin", "1", "nan", "unit_price"),
    ("Aspirin", "1", "1e400", "unit_price"),
    ("Aspirin", "1" + "0" * 400, "1", "quantity"),
    ("Aspirin", "9" * 5000, "1", "quantity"),
    ("Aspirin", str(2 ** 63), "1", "quantity"),
    ("Aspirin", 2 ** 63, "1", "quantity"),
])
def test_invalid_orders_are_rejected(name, quantity, price, field):
    with pytest.raises(ValidationError) as exc:
        validate_order(name, quantity, price)
    assert exc.value.field == field


def test_invalid_order_never_commits():
    recorder, store = recorder_over()
    with pytest.raises(ValidationError):
        recorder.record("Aspirin", "x", "1")
    assert store.overwrites == []
    assert recorder.orders == []


def test_free_items_are_allowed():
    assert validate_order(" Aspirin ", " 2 ", "0") == ("Aspirin", 2, 0.0)


def test_summary():
    recorder, _ = recorder_over()
    recorder.record("Bextra", 2, 4.0)
    recorder.record("Aspirin", 3, 2.5)
    recorder.record("Bextra", 1, 4.0)

    assert recorder.summary() == {
        'order_count': 3,
        'units_sold': 6,
        'total_revenue': 19.5,
        'revenue_by_medicine': {'Aspirin': 7.5, 'Bextra': 12.0},
    }


def test_summary_of_no_orders():
    recorder, _ = recorder_over()
    assert recorder.summary()['total_revenue'] == 0


def test_largest_storable_quantity_is_accepted():
    assert validate_order("Aspirin", "000" + str(2 ** 63 - 1), "0")[1] == 2 ** 63 - 1


def test_total_past_float_range_is_rejected():
    recorder, store = recorder_over()
    with pytest.raises(ValidationError) as exc:
        recorder.record("Aspirin", str(2 ** 63 - 1), "1e300")
    assert exc.value.rule == 'max'
    assert store.overwrites == []


def test_order_total_catches_overflow():
    with pytest.raises(ValidationError):
        order_total(10 ** 400, 1.0)


def test_stored_orders_keep_unknown_keys():
    stored = {'orderId': 1, 'orderDate': '2024-01-01', 'medicineName': 'A', 'quantity': 1,
              'unitPrice': 1, 'totalRevenue': 1, 'cashier': 'sam'}
    recorder, store = recorder_over({'sales': {'orders': [dict(stored)]}})

    recorder.record("B", 1, 2.0)

    assert store.documents['sales']['orders'][0] == stored
