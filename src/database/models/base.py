from typing import Dict, Any

import sqlalchemy as sa
from sqlalchemy import MetaData
from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import MappedAsDataclass, DeclarativeBase, Mapped, mapped_column

from src.config import SCHEMA


class Base(AsyncAttrs, MappedAsDataclass, DeclarativeBase):
    metadata = MetaData(schema=SCHEMA)

    id: Mapped[int] = mapped_column(
        sa.Integer(),
        primary_key=True,
        autoincrement=True,
        init=False
    )

    def update_without_saving(self, data: Dict[str, Any]) -> None:
        for field, value in data.items():
            setattr(self, field, value)
