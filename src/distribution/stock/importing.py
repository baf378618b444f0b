"""Bulk product import from CSV: command and handler.

Rows are upserted on (name, brand name). Only the product name is truly
required; every other column falls back to a default and the row is reported
with a warning naming the defaulted columns. Header spellings are matched
case- and whitespace-insensitively, so ``Brand Name``, ``brandName`` and
``brand`` all land in the same column.
"""

import csv
import io

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from distribution.access.actor import Actor
from distribution.domain import distribution
from distribution.stock.product import (
    DEFAULT_BRAND,
    DEFAULT_DIMENSION,
    DEFAULT_LOW_STOCK_THRESHOLD,
    Product,
)

logger = structlog.get_logger(__name__)

_COLUMN_ALIASES = {
    "name": ("name", "productname"),
    "brand_name": ("brandname", "brand", "brand_name"),
    "dimension": ("dimension", "size"),
    "stock_quantity": ("stockquantity", "stock_quantity", "stock", "quantity"),
    "low_stock_threshold": ("lowstockthreshold", "low_stock_threshold", "threshold"),
}

# Column label used in warnings
_WARNING_LABELS = {
    "name": "name",
    "brand_name": "brand",
    "dimension": "dimension",
    "stock_quantity": "stock",
    "low_stock_threshold": "threshold",
}


def _normalize_header(header) -> str:
    return "".join(str(header or "").lower().split())


def _as_int(raw, default):
    try:
        return int(float(raw))
    except (TypeError, ValueError):
        return default


def parse_product_rows(csv_text: str) -> list[dict]:
    """Parse CSV text into normalized row dicts.

    Each dict carries ``row`` (1-based), the product fields with defaults
    applied, and ``defaulted``: the warning labels of columns that were blank.
    """
    reader = csv.DictReader(io.StringIO(csv_text.strip()))
    rows = []
    for index, record in enumerate(reader, start=1):
        keyed = {_normalize_header(k): (v or "").strip() for k, v in record.items() if k is not None}
        values = {}
        for field_name, aliases in _COLUMN_ALIASES.items():
            values[field_name] = next((keyed[a] for a in aliases if keyed.get(a)), "")

        defaulted = [_WARNING_LABELS[f] for f, v in values.items() if v == ""]
        rows.append(
            {
                "row": index,
                "name": values["name"] or f"Product {index}",
                "brand_name": values["brand_name"] or DEFAULT_BRAND,
                "dimension": values["dimension"] or DEFAULT_DIMENSION,
                "stock_quantity": _as_int(values["stock_quantity"], 0),
                "low_stock_threshold": _as_int(values["low_stock_threshold"], DEFAULT_LOW_STOCK_THRESHOLD),
                "defaulted": defaulted,
            }
        )
    return rows


@distribution.command(part_of="Product")
class ImportProducts:
    csv_text = Text(required=True)
    actor_id = Identifier(required=True)
    actor_name = String(max_length=255)
    actor_role = String(max_length=50)


@distribution.command_handler(part_of=Product)
class ImportProductsHandler:
    @handle(ImportProducts)
    def import_products(self, command):
        rows = parse_product_rows(command.csv_text)
        if not rows:
            raise ValidationError({"csv_text": ["CSV has no rows"]})

        actor = Actor.from_command(command)
        repo = current_domain.repository_for(Product)
        seen: dict[tuple[str, str], Product] = {}
        results = {"total_rows": len(rows), "created": 0, "updated": 0, "errors": [], "warnings": []}

        for row in rows:
            if row["defaulted"]:
                results["warnings"].append(
                    {
                        "row": row["row"],
                        "message": f"Used defaults for: {', '.join(row['defaulted'])}",
                        "fields": row["defaulted"],
                    }
                )

            if row["stock_quantity"] < 0 or row["low_stock_threshold"] < 0:
                results["errors"].append({"row": row["row"], "message": "Stock quantity and threshold cannot be negative"})
                continue

            key = (row["name"], row["brand_name"])
            try:
                existing = seen.get(key) or _find_product(repo, *key)
                if existing is not None:
                    existing.update_details(
                        actor=actor,
                        dimension=row["dimension"],
                        stock_quantity=row["stock_quantity"],
                        low_stock_threshold=row["low_stock_threshold"],
                    )
                    repo.add(existing)
                    seen[key] = existing
                    results["updated"] += 1
                else:
                    product = Product.create(
                        name=row["name"],
                        actor=actor,
                        brand_name=row["brand_name"],
                        dimension=row["dimension"],
                        stock_quantity=row["stock_quantity"],
                        low_stock_threshold=row["low_stock_threshold"],
                    )
                    repo.add(product)
                    seen[key] = product
                    results["created"] += 1
            except ValidationError as exc:
                results["errors"].append({"row": row["row"], "message": _flatten(exc.messages)})

        logger.info(
            "Products imported",
            total_rows=results["total_rows"],
            created=results["created"],
            updated=results["updated"],
            errors=len(results["errors"]),
        )
        return results


def _find_product(repo, name, brand_name):
    matches = repo._dao.query.filter(name=name, brand_name=brand_name).all().items
    return matches[0] if matches else None


def _flatten(messages) -> str:
    return "; ".join(f"{field}: {', '.join(map(str, errors))}" for field, errors in messages.items())
