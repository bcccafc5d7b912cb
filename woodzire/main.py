from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.sessions import SessionMiddleware

from woodzire.core.config import settings
from woodzire.core.logging import configure_logging
from woodzire.db.session import engine, SessionLocal
from woodzire.db.base import Base
from woodzire.models import (user, catalog, orders, giftcards, promotions, settings as site_settings,  # noqa: F401
                             engagement, customer)
from woodzire.api import (auth as auth_routes, catalog as catalog_routes, checkout as checkout_routes,
                          orders as orders_routes, giftcards as giftcards_routes,
                          promotions as promotions_routes, settings as settings_routes,
                          engagement as engagement_routes, dashboard as dashboard_routes,
                          account as account_routes, users as users_routes)
from woodzire.api.auth import seed_admin

configure_logging()

app = FastAPI(title=settings.APP_NAME)
app.add_middleware(SessionMiddleware, secret_key=settings.SECRET_KEY)
app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])

Base.metadata.create_all(bind=engine)
db = SessionLocal(); seed_admin(db); db.close()

app.include_router(auth_routes.router)
app.include_router(catalog_routes.router)
app.include_router(checkout_routes.router)
app.include_router(orders_routes.router)
app.include_router(giftcards_routes.router)
app.include_router(promotions_routes.router)
app.include_router(settings_routes.router)
app.include_router(engagement_routes.router)
app.include_router(dashboard_routes.router)
app.include_router(account_routes.router)
app.include_router(users_routes.router)

@app.get("/health")
def health(): return {"ok": True}
