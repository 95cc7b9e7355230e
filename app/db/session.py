from sqlalchemy import create_engine, event
from sqlalchemy.pool import QueuePool, StaticPool
from sqlalchemy.orm import sessionmaker, declarative_base
from app.core.config import settings
import logging
import threading
import contextvars

DATABASE_URL = settings.DATABASE_URL

# SQLite needs its own pooling: an in-memory database must be shared through a
# single connection, and pool sizing arguments are rejected.
engine_kwargs = {}
if DATABASE_URL.startswith("sqlite"):
    engine_kwargs["connect_args"] = {"check_same_thread": False}
    if DATABASE_URL in ("sqlite://", "sqlite:///:memory:"):
        engine_kwargs["poolclass"] = StaticPool
else:
    # pool_pre_ping avoids errors caused by stale connections dropped server-side
    engine_kwargs.update(
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_pre_ping=True,
        pool_recycle=settings.DB_POOL_RECYCLE,
        poolclass=QueuePool,
    )

engine = create_engine(DATABASE_URL, **engine_kwargs)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

# --- Pool monitoring: log connects and checkouts to help diagnose excess connections ---
_pool_logger = logging.getLogger("app.db.pool")
_connect_count = 0
_checkout_count = 0
_pool_lock = threading.Lock()

# --- Per-request DB query counting using ContextVar ---
# The HTTP middleware sets a one-slot counter at the start of each request and
# the cursor listener increments it in place; handlers run in a copied context,
# so the counter object is mutated rather than re-set.
request_db_query_count = contextvars.ContextVar("request_db_query_count", default=None)
_global_db_query_count = 0


@event.listens_for(engine, "connect")
def _on_connect(dbapi_connection, connection_record):
    global _connect_count
    with _pool_lock:
        _connect_count += 1
        cnt = _connect_count
    if cnt % settings.DB_LOG_EVERY_N == 0:
        _pool_logger.info("SQLAlchemy pool CONNECT events: total opened=%s", cnt)


@event.listens_for(engine, "checkout")
def _on_checkout(dbapi_connection, connection_record, connection_proxy):
    global _checkout_count
    with _pool_lock:
        _checkout_count += 1
        cnt = _checkout_count
    if cnt % settings.DB_LOG_EVERY_N == 0:
        _pool_logger.info("SQLAlchemy pool CHECKOUT events: total checkouts=%s", cnt)


@event.listens_for(engine, "before_cursor_execute")
def _on_before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
    counter = request_db_query_count.get()
    if counter is not None:
        counter[0] += 1
    global _global_db_query_count
    with _pool_lock:
        _global_db_query_count += 1


def get_global_db_queries_total() -> int:
    """Return the total number of DB roundtrips since process start."""
    return _global_db_query_count


def get_db():
    """FastAPI dependency that provides a scoped SQLAlchemy Session.

    The session is always closed after the request so its connection
    returns to the pool.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_db():
    # Import models here so they are registered on the metadata
    import app.models.client  # noqa: F401
    import app.models.plat  # noqa: F401
    import app.models.extra  # noqa: F401
    import app.models.commande  # noqa: F401
    import app.models.detail_commande  # noqa: F401
    import app.models.notification_token  # noqa: F401
    import app.models.notification_preference  # noqa: F401
    Base.metadata.create_all(bind=engine)
