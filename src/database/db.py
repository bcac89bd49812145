import contextlib
from typing import AsyncIterator, AsyncGenerator, Dict, Any

from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession, AsyncEngine

from src.config import SQLALCHEMY_ECHO, SSL_REQUIRED
from src.database.models import Base


class DatabaseSessionManager:
    def __init__(self):
        self._engine: AsyncEngine | None = None
        self._sessionmaker: async_sessionmaker | None = None

    def init(self, connection_string: str, tests: bool = False):
        if tests:
            echo = False
        else:
            echo = SQLALCHEMY_ECHO

        engine_kwargs: Dict[str, Any] = {"echo": echo}
        if connection_string.startswith("postgresql"):
            engine_kwargs["pool_size"] = 10
            engine_kwargs["max_overflow"] = 5
            if SSL_REQUIRED:
                engine_kwargs["connect_args"] = {'sslmode': "verify-full", 'target_session_attrs': 'read-write'}

        self._engine = create_async_engine(connection_string, **engine_kwargs)
        self._sessionmaker = async_sessionmaker(bind=self._engine, expire_on_commit=False)

    async def close(self):
        if self._engine is None:
            raise Exception("DatabaseSessionManager is not initialized")
        await self._engine.dispose()
        self._engine = None
        self._sessionmaker = None

    @contextlib.asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        if self._sessionmaker is None:
            raise Exception("DatabaseSessionManager is not initialized")

        session = self._sessionmaker()
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def create_all(self):
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)


sessionmanager = DatabaseSessionManager()


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with sessionmanager.session() as session:
        yield session
