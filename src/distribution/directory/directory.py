"""Customer and Route lookups, keyed by name.

Both exist so order entry can offer autocomplete. They are upserted as a
side effect of orders being created and carry no workflow of their own.
"""

from datetime import UTC, datetime

from protean.fields import DateTime, String, Text

from distribution.domain import distribution


@distribution.aggregate
class Customer:
    name = String(required=True, max_length=255, unique=True)
    phone = String(max_length=50)
    address = Text()
    route = String(max_length=255)
    created_at = DateTime()
    updated_at = DateTime()

    def refresh(self, phone=None, address=None, route=None):
        """Overwrite contact details with any newer non-empty values."""
        changed = False
        for field_name, value in (("phone", phone), ("address", address), ("route", route)):
            if value and value != getattr(self, field_name):
                setattr(self, field_name, value)
                changed = True
        if changed:
            self.updated_at = datetime.now(UTC)
        return changed


@distribution.aggregate
class Route:
    name = String(required=True, max_length=255, unique=True)
    created_at = DateTime()
