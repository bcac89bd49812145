import asyncio
import sys

from src.auth.manager import create_user
from src.config import DB_URI, BUILTIN_ADMIN_EMAIL, BUILTIN_ADMIN_PASSWORD, BUILTIN_ADMIN_NAME
from src.database.db import sessionmanager
from src.schemas.user import UserCreateSchema
from src.utils.exceptions import DBDuplicateException
from src.utils.loggers import logger

sessionmanager.init(DB_URI)


async def main():
    # Tables
    await sessionmanager.create_all()
    logger.info('Database tables are created')

    # Built-in administrator
    if BUILTIN_ADMIN_EMAIL and BUILTIN_ADMIN_PASSWORD:
        user_schema = UserCreateSchema(
            email=BUILTIN_ADMIN_EMAIL,
            password=BUILTIN_ADMIN_PASSWORD,
            name=BUILTIN_ADMIN_NAME,
            is_superuser=True,
            is_verified=True
        )
        try:
            await create_user(user_schema)

        except DBDuplicateException:
            logger.warning(f'User {BUILTIN_ADMIN_EMAIL} already exists')

    await sessionmanager.close()

if sys.platform == 'win32':
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

asyncio.run(main())
