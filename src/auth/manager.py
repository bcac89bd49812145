import contextlib
from typing import Optional

from fastapi import Depends, Request
from fastapi_users import BaseUserManager, IntegerIDMixin
from fastapi_users.exceptions import UserAlreadyExists

from src.auth.db import get_user_db
from src.config import JWT_SECRET
from src.database.db import sessionmanager
from src.database.models.user import UserOrm
from src.schemas.user import UserCreateSchema
from src.utils.exceptions import DBDuplicateException
from src.utils.loggers import logger

SECRET = JWT_SECRET


class UserManager(IntegerIDMixin, BaseUserManager[UserOrm, int]):
    reset_password_token_secret = SECRET
    verification_token_secret = SECRET

    async def on_after_register(self, user: UserOrm, request: Optional[Request] = None):
        logger.info(f"User {user.id} ({user.email}) has registered")

    async def on_after_login(self, user: UserOrm, request: Optional[Request] = None, response=None):
        logger.info(f"User {user.id} ({user.email}) logged in")


async def get_user_manager(user_db=Depends(get_user_db)):
    yield UserManager(user_db)

get_user_db_context = contextlib.asynccontextmanager(get_user_db)
get_user_manager_context = contextlib.asynccontextmanager(get_user_manager)


async def create_user(user_schema: UserCreateSchema) -> UserOrm:
    try:
        async with sessionmanager.session() as session:
            async with get_user_db_context(session) as user_db:
                async with get_user_manager_context(user_db) as user_manager:
                    user = await user_manager.create(user_schema)
                    logger.info(f"User created {user.email}")
                    return user

    except UserAlreadyExists:
        raise DBDuplicateException('Pengguna dengan email ini sudah terdaftar')
