import io
import logging

import pandas as pd
from sqlalchemy.orm import Session

from woodzire.models.catalog import Product
from woodzire.services.catalog import slugify, DEFAULT_LOW_STOCK_THRESHOLD

logger = logging.getLogger(__name__)

CSV_COLUMNS = ["name", "slug", "price", "compare_at_price", "category", "wood_type", "stock_quantity",
               "low_stock_threshold", "description", "care_instructions", "shipping_info",
               "is_active", "is_featured", "is_trending"]
NUMERIC_COLUMNS = {"price", "compare_at_price", "stock_quantity", "low_stock_threshold", "prep_time_days",
                   "delivery_charge", "international_delivery_charge", "discount_percentage"}
INTEGER_COLUMNS = {"stock_quantity", "low_stock_threshold", "prep_time_days"}
BOOLEAN_COLUMNS = {"is_active", "is_featured", "is_trending", "is_made_to_order", "is_on_sale"}
BOOLEAN_DEFAULTS = {"is_active": True}
TEXT_COLUMNS = {"slug", "category", "wood_type", "description", "care_instructions", "shipping_info"}


class CsvImportError(Exception):
    pass


def export_products_csv(products) -> str:
    rows = [{c: getattr(p, c) for c in CSV_COLUMNS} for p in products]
    df = pd.DataFrame(rows, columns=CSV_COLUMNS)
    df["low_stock_threshold"] = df["low_stock_threshold"].fillna(DEFAULT_LOW_STOCK_THRESHOLD)
    # pandas quotes any field holding a comma, quote or newline
    return df.to_csv(index=False)


def _number(value, column):
    if value == "":
        return 0 if column == "stock_quantity" else None
    n = float(value)
    return int(n) if column in INTEGER_COLUMNS else n


def parse_row(raw: dict) -> dict:
    row = {}
    for col, value in raw.items():
        value = (value or "").strip() if isinstance(value, str) else value
        if col in NUMERIC_COLUMNS:
            row[col] = _number(value, col)
        elif col in BOOLEAN_COLUMNS:
            row[col] = value.lower() == "true" if value != "" else BOOLEAN_DEFAULTS.get(col, False)
        elif col == "name" or col in TEXT_COLUMNS:
            row[col] = value or None
    return row


def import_products_csv(db: Session, content) -> dict:
    """
    Upsert products from CSV, keyed by slug.

    Quoted fields and embedded newlines are handled by pandas. Rows without a
    name or category are skipped; a missing slug is derived from the name.
    """
    text = content.decode("utf-8-sig") if isinstance(content, bytes) else content
    try:
        df = pd.read_csv(io.StringIO(text), dtype=str, keep_default_na=False)
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise CsvImportError(f"Invalid CSV format: {e}")
    df.columns = [c.strip().lower() for c in df.columns]
    if not {"name", "category"}.issubset(df.columns):
        raise CsvImportError("CSV must have at least 'name' and 'category' columns")

    created = updated = skipped = 0
    for line_no, raw in enumerate(df.to_dict(orient="records"), start=2):
        try:
            data = parse_row(raw)
        except ValueError as e:
            raise CsvImportError(f"Row {line_no}: {e}")
        if not data.get("name") or not data.get("category"):
            skipped += 1
            continue
        slug = slugify(data.get("slug") or data["name"])
        data["slug"] = slug
        data["price"] = data.get("price") or 0
        if data.get("low_stock_threshold") is None:
            data["low_stock_threshold"] = DEFAULT_LOW_STOCK_THRESHOLD
        existing = db.query(Product).filter(Product.slug == slug).first()
        if existing:
            for k, v in data.items():
                setattr(existing, k, v)
            updated += 1
        else:
            db.add(Product(images=[], **data))
            created += 1
        db.flush()
    logger.info("CSV import: %d created, %d updated, %d skipped", created, updated, skipped)
    return {"created": created, "updated": updated, "skipped": skipped}
