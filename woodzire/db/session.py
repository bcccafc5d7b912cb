from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from woodzire.core.config import settings

connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}
# an in-memory database only lives as long as its single connection
pool_args = {"poolclass": StaticPool} if settings.DATABASE_URL in ("sqlite://", "sqlite:///:memory:") else {}
engine = create_engine(settings.DATABASE_URL, connect_args=connect_args, **pool_args)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
