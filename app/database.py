# app/database.py
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

# Import models so SQLModel metadata is populated before create_all()
from app.models import local_storage as _local_storage_models  # noqa: F401

# ---------------------------------------------------------
# Local device storage (SQLite)
#
# - check_same_thread=False : FastAPI runs sync endpoints in a threadpool
# - StaticPool for in-memory URLs, otherwise every connection would get
#   its own empty database
# ---------------------------------------------------------

IN_MEMORY_URLS = ("sqlite://", "sqlite:///:memory:")


def create_local_engine(url: str, echo: bool = False) -> Engine:
    """
    Build the engine backing the storefront's device storage.

    Args:
        url: SQLAlchemy URL, e.g. "sqlite:///storefront.db" or "sqlite://"
             for a throwaway in-memory store.
        echo: set to True if you want to debug SQL queries
    """
    if not url.startswith("sqlite"):
        return create_engine(url, echo=echo, pool_pre_ping=True)

    if url in IN_MEMORY_URLS:
        return create_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    return create_engine(
        url,
        echo=echo,
        connect_args={"check_same_thread": False},
    )


def create_db_and_tables(engine: Engine) -> None:
    """
    Create all tables defined in SQLModel metadata if they do not exist.

    This is called once on application startup.
    """
    SQLModel.metadata.create_all(engine)
