from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlmodel.ext.asyncio.session import AsyncSession


def create_engine(db_uri: str, busy_timeout: float = 30.0, echo: bool = False) -> AsyncEngine:
    """
    Create the async engine.

    SQLite has no row locks, so every transaction is begun IMMEDIATE: writers
    queue on the database lock instead of failing on lock upgrade. This
    includes read-only transactions, so on SQLite lookups also wait behind
    writers for at most busy_timeout seconds. Other backends begin normally and
    rely on SELECT ... FOR UPDATE in the repositories.
    """
    if not db_uri.startswith("sqlite"):
        return create_async_engine(db_uri, echo=echo, future=True)

    engine = create_async_engine(
        db_uri, echo=echo, future=True, connect_args={"timeout": busy_timeout}
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_begin(dbapi_connection, connection_record):
        # Stop the driver from emitting its own deferred BEGIN
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )
