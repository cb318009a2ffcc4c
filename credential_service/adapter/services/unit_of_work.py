from sqlalchemy.ext.asyncio import async_sessionmaker

from credential_service.adapter.repositories.password_reset_token_repository import (
    PasswordResetTokenRepository,
)
from credential_service.adapter.repositories.user_repository import UserRepository
from credential_service.app.services.unit_of_work import UnitOfWork


class SqlAlchemyUnitOfWork(UnitOfWork):
    """
    SQLAlchemy implementation of UnitOfWork pattern.

    Each `async with` opens a fresh session, so one instance maps to one
    transaction. Anything not committed is rolled back on exit, including
    when the block is cancelled. Loaded entities are detached before the
    rollback so they keep their state for the caller.
    """

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory
        self.session = None

    async def __aenter__(self):
        self.session = self.session_factory()
        # Initialize all repositories with the session
        self.users = UserRepository(self.session)
        self.password_reset_tokens = PasswordResetTokenRepository(self.session)
        return self

    async def __aexit__(self, *args):
        try:
            # Rollback expires attached instances; detached ones stay readable
            self.session.expunge_all()
            await self.rollback()
        finally:
            await self.session.close()
            self.session = None

    async def commit(self):
        await self.session.commit()

    async def rollback(self):
        await self.session.rollback()
