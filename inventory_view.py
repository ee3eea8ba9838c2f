# inventory_view.py
"""
The inventory table: a display sequence derived from the synchronizer's list,
narrowed by a case-insensitive name search.
"""
from validation import validate_medicine


def matches(medicine, query):
    return query.lower() in medicine.name.lower()


def filter_by_name(medicines, query):
    query = (query or "").strip()
    if not query:
        return list(medicines)
    return [m for m in medicines if matches(m, query)]


def units_in_stock(medicines):
    """Sum of every countable quantity; unparseable ones are left out."""
    return sum(u for u in (m.units for m in medicines) if u is not None)


def stock_label(medicines):
    try:
        return str(units_in_stock(medicines))
    except ValueError:
        return "too large to display"


class InventoryView:
    """Read side of the inventory plus edit/delete routed through the synchronizer.

    The display list never feeds back into the synchronizer; edits and deletes
    locate their record in the authoritative list by identity.
    """

    def __init__(self, synchronizer):
        self.synchronizer = synchronizer
        self.query = ""
        self.display = synchronizer.items

    @property
    def is_filtered(self):
        return bool(self.query)

    def search(self, query):
        self.query = (query or "").strip()
        return self.refresh()

    def refresh(self):
        self.display = filter_by_name(self.synchronizer.items, self.query)
        return self.display

    def entries(self):
        """(authoritative position, record) for every displayed record."""
        return [(self.synchronizer.index_of(m), m) for m in self.display]

    def edit(self, medicine, updated):
        validate_medicine(updated)
        updated = updated.replacing(medicine)
        self.synchronizer.update(self.synchronizer.index_of(medicine), updated)
        return self.refresh()

    def delete(self, medicine):
        self.synchronizer.delete(self.synchronizer.index_of(medicine))
        return self.refresh()
