import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, UploadFile, BackgroundTasks
from fastapi.responses import Response
from sqlalchemy import or_
from sqlalchemy.orm import Session

from woodzire.api.deps import get_db, require_admin, get_or_404, require_confirmation
from woodzire.models.catalog import Product, Category, ProductBundle, BundleItem
from woodzire.schemas import (ProductIn, ProductUpdate, ProductOut, RestockRequest,
                              CategoryIn, CategoryOut, BundleIn)
from woodzire.services import catalog, notify
from woodzire.services.catalog_csv import export_products_csv, import_products_csv, CsvImportError
from woodzire.services.promotions import live_sales, effective_price

logger = logging.getLogger(__name__)
router = APIRouter(tags=["catalog"])


def product_out(p: Product, sales) -> ProductOut:
    out = ProductOut.model_validate(p)
    out.effective_price = effective_price(p, sales)
    return out


# Storefront

@router.get("/products")
def list_products(q: Optional[str] = None, category: Optional[str] = None, featured: Optional[bool] = None,
                  trending: Optional[bool] = None, db: Session = Depends(get_db)):
    query = db.query(Product).filter(Product.is_active == True)  # noqa: E712
    if q:
        like = f"%{q}%"
        query = query.filter(or_(Product.name.ilike(like), Product.category.ilike(like)))
    if category:
        query = query.filter(Product.category == category)
    if featured is not None:
        query = query.filter(Product.is_featured == featured)
    if trending is not None:
        query = query.filter(Product.is_trending == trending)
    sales = live_sales(db)
    return [product_out(p, sales) for p in query.order_by(Product.created_at.desc()).all()]


@router.get("/products/{slug}")
def get_product(slug: str, db: Session = Depends(get_db)):
    p = db.query(Product).filter(Product.slug == slug, Product.is_active == True).first()  # noqa: E712
    if not p:
        raise HTTPException(status_code=404, detail="Product not found")
    return product_out(p, live_sales(db))


@router.get("/categories")
def list_categories(db: Session = Depends(get_db)):
    cats = db.query(Category).filter(Category.is_active == True).order_by(Category.sort_order, Category.name).all()  # noqa: E712
    return [CategoryOut.model_validate(c) for c in cats]


def bundle_out(b: ProductBundle) -> dict:
    return {"id": b.id, "name": b.name, "description": b.description,
            "discount_percentage": b.discount_percentage, "is_active": b.is_active,
            "items": [{"product_id": i.product_id, "quantity": i.quantity,
                       "name": i.product.name if i.product else None} for i in b.items],
            **catalog.bundle_price(b)}


@router.get("/bundles")
def list_bundles(db: Session = Depends(get_db)):
    bundles = db.query(ProductBundle).filter(ProductBundle.is_active == True).all()  # noqa: E712
    return [bundle_out(b) for b in bundles]


# Admin: products

@router.get("/admin/products")
def admin_list_products(q: Optional[str] = None, db: Session = Depends(get_db), user=Depends(require_admin)):
    query = db.query(Product)
    if q:
        like = f"%{q}%"
        query = query.filter(or_(Product.name.ilike(like), Product.category.ilike(like)))
    sales = live_sales(db)
    return [product_out(p, sales) for p in query.order_by(Product.created_at.desc()).all()]


@router.post("/admin/products", status_code=201)
def create_product(payload: ProductIn, db: Session = Depends(get_db), user=Depends(require_admin)):
    data = payload.model_dump()
    data["slug"] = catalog.slugify(data["slug"]) if data.get("slug") else catalog.unique_slug(db, data["name"])
    if db.query(Product.id).filter(Product.slug == data["slug"]).first():
        raise HTTPException(status_code=400, detail=f"Slug '{data['slug']}' already exists")
    p = Product(**data)
    db.add(p); db.commit(); db.refresh(p)
    return product_out(p, live_sales(db))


@router.put("/admin/products/{product_id}")
def update_product(product_id: int, payload: ProductUpdate, db: Session = Depends(get_db), user=Depends(require_admin)):
    p = get_or_404(db, Product, product_id)
    data = payload.model_dump(exclude_unset=True)
    if data.get("slug"):
        data["slug"] = catalog.slugify(data["slug"])
        if db.query(Product.id).filter(Product.slug == data["slug"], Product.id != p.id).first():
            raise HTTPException(status_code=400, detail=f"Slug '{data['slug']}' already exists")
    for k, v in data.items():
        setattr(p, k, v)
    db.commit(); db.refresh(p)
    return product_out(p, live_sales(db))


@router.delete("/admin/products/{product_id}")
def delete_product(product_id: int, confirmed: bool = Depends(require_confirmation),
                   db: Session = Depends(get_db), user=Depends(require_admin)):
    p = get_or_404(db, Product, product_id)
    slug = p.slug
    db.delete(p); db.commit()
    logger.info("Product %s deleted by %s", slug, user.email)
    return {"id": product_id, "deleted": True}


@router.post("/admin/products/{product_id}/restock")
def restock_product(product_id: int, payload: RestockRequest, background: BackgroundTasks,
                    db: Session = Depends(get_db), user=Depends(require_admin)):
    p = get_or_404(db, Product, product_id)
    emails = catalog.restock(db, p, payload.quantity)
    db.commit(); db.refresh(p)
    if emails:
        background.add_task(notify.send_order_notification, notify.back_in_stock_event(p, emails))
    return {"id": p.id, "stock_quantity": p.stock_quantity, "notified": len(emails)}


@router.get("/admin/products/low-stock")
def low_stock(db: Session = Depends(get_db), user=Depends(require_admin)):
    return [{"id": p.id, "name": p.name, "stock_quantity": p.stock_quantity,
             "low_stock_threshold": p.low_stock_threshold} for p in catalog.low_stock_products(db)]


@router.post("/admin/products/low-stock/alert")
def low_stock_alert(background: BackgroundTasks, db: Session = Depends(get_db), user=Depends(require_admin)):
    products = catalog.low_stock_products(db)
    for p in products:
        background.add_task(notify.send_order_notification, notify.low_stock_event(p))
    return {"count": len(products)}


@router.get("/admin/products/export.csv")
def export_products(db: Session = Depends(get_db), user=Depends(require_admin)):
    content = export_products_csv(db.query(Product).order_by(Product.id).all())
    filename = f"woodzire-products-{datetime.utcnow():%Y-%m-%d}.csv"
    return Response(content=content, media_type="text/csv",
                    headers={"Content-Disposition": f'attachment; filename="{filename}"'})


@router.post("/admin/products/import")
async def import_products(csv: UploadFile, db: Session = Depends(get_db), user=Depends(require_admin)):
    content = await csv.read()
    try:
        result = import_products_csv(db, content)
        db.commit()
    except CsvImportError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))
    return result


# Admin: categories and bundles

@router.post("/admin/categories", status_code=201)
def create_category(payload: CategoryIn, db: Session = Depends(get_db), user=Depends(require_admin)):
    data = payload.model_dump()
    data["slug"] = catalog.slugify(data.get("slug") or data["name"])
    if db.query(Category.id).filter(Category.slug == data["slug"]).first():
        raise HTTPException(status_code=400, detail=f"Category '{data['slug']}' already exists")
    c = Category(**data)
    db.add(c); db.commit(); db.refresh(c)
    return CategoryOut.model_validate(c)


@router.put("/admin/categories/{category_id}")
def update_category(category_id: int, payload: CategoryIn, db: Session = Depends(get_db), user=Depends(require_admin)):
    c = get_or_404(db, Category, category_id)
    data = payload.model_dump()
    data["slug"] = catalog.slugify(data.get("slug") or data["name"])
    for k, v in data.items():
        setattr(c, k, v)
    db.commit(); db.refresh(c)
    return CategoryOut.model_validate(c)


@router.delete("/admin/categories/{category_id}")
def delete_category(category_id: int, confirmed: bool = Depends(require_confirmation),
                    db: Session = Depends(get_db), user=Depends(require_admin)):
    c = get_or_404(db, Category, category_id)
    db.delete(c); db.commit()
    return {"id": category_id, "deleted": True}


def _set_bundle_items(db: Session, bundle: ProductBundle, lines):
    bundle.items.clear()
    for line in lines:
        get_or_404(db, Product, line.product_id)
        bundle.items.append(BundleItem(product_id=line.product_id, quantity=line.quantity))


@router.post("/admin/bundles", status_code=201)
def create_bundle(payload: BundleIn, db: Session = Depends(get_db), user=Depends(require_admin)):
    b = ProductBundle(name=payload.name, description=payload.description,
                      discount_percentage=payload.discount_percentage, is_active=payload.is_active)
    _set_bundle_items(db, b, payload.items)
    db.add(b); db.commit(); db.refresh(b)
    return bundle_out(b)


@router.put("/admin/bundles/{bundle_id}")
def update_bundle(bundle_id: int, payload: BundleIn, db: Session = Depends(get_db), user=Depends(require_admin)):
    b = get_or_404(db, ProductBundle, bundle_id, "Bundle")
    b.name, b.description = payload.name, payload.description
    b.discount_percentage, b.is_active = payload.discount_percentage, payload.is_active
    _set_bundle_items(db, b, payload.items)
    db.commit(); db.refresh(b)
    return bundle_out(b)


@router.delete("/admin/bundles/{bundle_id}")
def delete_bundle(bundle_id: int, confirmed: bool = Depends(require_confirmation),
                  db: Session = Depends(get_db), user=Depends(require_admin)):
    b = get_or_404(db, ProductBundle, bundle_id, "Bundle")
    db.delete(b); db.commit()
    return {"id": bundle_id, "deleted": True}
