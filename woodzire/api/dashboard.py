from datetime import datetime

import pandas as pd
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from woodzire.api.deps import get_db, require_admin
from woodzire.models.catalog import Product
from woodzire.models.orders import Order, ORDER_STATUSES
from woodzire.services.catalog import DEFAULT_LOW_STOCK_THRESHOLD

router = APIRouter(prefix="/admin", tags=["dashboard"])


def summarize(orders: pd.DataFrame, products: pd.DataFrame, today=None) -> dict:
    """
    Dashboard figures from the orders and products frames.

    revenue       = sum(total) over orders that are not cancelled
    orders_today  = orders whose created_at falls on today's (UTC) date
    low_stock     = products with stock_quantity <= low_stock_threshold
    """
    today = today or datetime.utcnow().date()
    by_status = {s: 0 for s in ORDER_STATUSES}
    revenue = 0.0
    orders_today = 0
    if not orders.empty:
        counts = orders["status"].value_counts()
        by_status.update({k: int(v) for k, v in counts.items()})
        revenue = float(orders.loc[orders["status"] != "cancelled", "total"].sum())
        created = pd.to_datetime(orders["created_at"])
        orders_today = int((created.dt.date == today).sum())

    low_stock = 0
    out_of_stock = 0
    if not products.empty:
        threshold = products["low_stock_threshold"].fillna(DEFAULT_LOW_STOCK_THRESHOLD)
        threshold = threshold.where(threshold > 0, DEFAULT_LOW_STOCK_THRESHOLD)
        low_stock = int((products["stock_quantity"] <= threshold).sum())
        out_of_stock = int((products["stock_quantity"] <= 0).sum())

    return {
        "total_orders": int(len(orders)),
        "orders_by_status": by_status,
        "revenue": round(revenue, 2),
        "orders_today": orders_today,
        "total_products": int(len(products)),
        "low_stock_count": low_stock,
        "out_of_stock_count": out_of_stock,
    }


@router.get("/dashboard")
def dashboard(db: Session = Depends(get_db), user=Depends(require_admin)):
    orders = pd.read_sql(db.query(Order.status, Order.total, Order.created_at).statement, db.connection())
    products = pd.read_sql(
        db.query(Product.stock_quantity, Product.low_stock_threshold).statement, db.connection())
    return summarize(orders, products)
