# validation.py
"""
Medicine form rules and the controller that applies them.

Rules run in a fixed order and stop at the first failure:

    1. name      non-empty, at most 100 characters
    2. quantity  non-empty
    3. quantity  digits 0-9 only
    4. id        non-empty, at most 100 characters

An empty quantity is reported by rule 2, never by rule 3.
"""
import logging
import re

from models import Medicine

logger = logging.getLogger(__name__)

MAX_TEXT_LENGTH = 100
DIGITS_ONLY = re.compile(r'[0-9]*')

# form field name -> Medicine attribute
FORM_FIELDS = {
    'name': 'name',
    'id': 'id',
    'quantity': 'quantity',
    'usage': 'usage',
    'sideEffects': 'side_effects',
    'side_effects': 'side_effects',
}


class ValidationError(ValueError):
    """A draft broke a rule; ``field`` and ``rule`` say which one."""

    def __init__(self, field, rule, message):
        self.field = field
        self.rule = rule
        self.message = message
        super().__init__(message)


def _check_text(value, field, label):
    if len(value) == 0:
        raise ValidationError(field, 'required', f"{label} cannot be empty")
    if len(value) > MAX_TEXT_LENGTH:
        raise ValidationError(field, 'max_length', f"{label} cannot be longer than {MAX_TEXT_LENGTH} characters.")


def validate_medicine(draft):
    """Return ``draft`` unchanged when it passes every rule, else raise ValidationError."""
    _check_text(draft.name, 'name', 'Medicine Name')
    if len(draft.quantity) == 0:
        raise ValidationError('quantity', 'required', "Quantity cannot be empty")
    if not DIGITS_ONLY.fullmatch(draft.quantity):
        raise ValidationError('quantity', 'numeric', "Quantity must be numeric")
    _check_text(draft.id, 'id', 'Medicine ID')
    return draft


def draft_from_form(form):
    """Build a draft from submitted form values (a dict or werkzeug MultiDict)."""
    values = {}
    for key, attr in FORM_FIELDS.items():
        if key in form:
            values[attr] = form.get(key) or ""
    return Medicine(**values)


class MedicineForm:
    """Holds the add-medicine draft and the last error shown to the user."""

    def __init__(self, synchronizer):
        self.synchronizer = synchronizer
        self.draft = Medicine()
        self.error = None

    @property
    def show_error(self):
        return self.error is not None

    @property
    def error_message(self):
        return self.error.message if self.error else None

    def submit(self, draft=None):
        """Validate and add the draft.

        Returns the added record, or None when a rule failed (see ``error``).
        Store failures propagate and leave the draft in place for a resubmit.
        """
        if draft is not None:
            self.draft = draft
        try:
            record = validate_medicine(self.draft)
        except ValidationError as e:
            logger.info("Rejected medicine draft: %s (%s)", e.message, e.rule)
            self.error = e
            return None
        self.error = None
        self.synchronizer.add(record)
        self.draft = Medicine()
        return record
