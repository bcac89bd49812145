import traceback
from typing import Dict, Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.database.models import UserOrm
from src.utils.exceptions import DBException, DBDuplicateException, api_logger


class BaseRepository:

    def __init__(self, session: AsyncSession, user: UserOrm | None = None):
        self.session = session
        self.user = user
        self.logger = api_logger

    async def select_helper(self, stmt, scalars=True) -> Any:
        try:
            if scalars:
                result = await self.session.scalars(
                    stmt,
                    execution_options={"populate_existing": True}
                )
                result = result.unique()
            else:
                result = await self.session.execute(stmt)

            await self.session.commit()
            return result

        except Exception:
            self.logger.error(traceback.format_exc())
            raise DBException()

    async def select_all(self, stmt, scalars=True) -> Any:
        dataset = await self.select_helper(stmt, scalars)
        return dataset.all()

    async def select_first(self, stmt, scalars=True) -> Any:
        dataset = await self.select_helper(stmt, scalars)
        return dataset.first()

    async def select_single_field(self, stmt) -> Any:
        dataset = await self.select_helper(stmt, scalars=False)
        row = dataset.first()
        return row[0] if row else None

    async def save_object(self, obj: Any) -> None:
        try:
            self.session.add(obj)
            await self.session.flush()
            await self.session.commit()
            await self.session.refresh(obj)

        except IntegrityError:
            await self.session.rollback()
            self.logger.error(traceback.format_exc())
            raise DBDuplicateException()

        except Exception:
            await self.session.rollback()
            self.logger.error(traceback.format_exc())
            raise DBException()

    async def update_object(self, obj, update_data: Dict[str, Any]) -> None:
        obj.update_without_saving(update_data)
        await self.save_object(obj)
