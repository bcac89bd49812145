import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from src.database.models.base import Base


class UserOrm(Base):
    __tablename__ = "user"
    __table_args__ = {
        'comment': 'Pengguna'
    }

    email: Mapped[str] = mapped_column(
        sa.String(320),
        unique=True,
        index=True,
        nullable=False,
        comment="Email (login)"
    )

    hashed_password: Mapped[str] = mapped_column(
        sa.String(1024),
        nullable=False,
        comment="Hash kata sandi"
    )

    name: Mapped[str] = mapped_column(
        sa.String(100),
        nullable=False,
        default="",
        server_default="",
        comment="Nama"
    )

    is_active: Mapped[bool] = mapped_column(
        sa.Boolean,
        nullable=False,
        default=True,
        comment="Pengguna aktif"
    )

    is_superuser: Mapped[bool] = mapped_column(
        sa.Boolean,
        nullable=False,
        default=False,
        comment="Superuser"
    )

    is_verified: Mapped[bool] = mapped_column(
        sa.Boolean,
        nullable=False,
        default=False,
        comment="Email terverifikasi"
    )
