import datetime
from decimal import Decimal
from typing import List

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.database.models.base import Base


class PartnerOrm(Base):
    __tablename__ = "partner"
    __table_args__ = (
        sa.CheckConstraint("total_transactions >= 0", name="partner_total_transactions_non_negative"),
        sa.CheckConstraint("total_amount >= 0", name="partner_total_amount_non_negative"),
        {'comment': 'Mitra usaha bandara'}
    )

    name: Mapped[str] = mapped_column(
        sa.String(255),
        nullable=False,
        comment="Nama mitra"
    )

    # Running totals over the ledger, decremented on every revenue delete
    total_transactions: Mapped[int] = mapped_column(
        sa.Integer(),
        nullable=False,
        server_default=sa.text("0"),
        init=False,
        comment="Jumlah transaksi"
    )

    total_amount: Mapped[Decimal] = mapped_column(
        sa.Numeric(15, 2),
        nullable=False,
        server_default=sa.text("0"),
        init=False,
        comment="Total nilai transaksi"
    )

    created_at: Mapped[datetime.datetime] = mapped_column(
        sa.DateTime,
        nullable=False,
        server_default=sa.func.now(),
        init=False,
        comment="Waktu pembuatan"
    )

    updated_at: Mapped[datetime.datetime] = mapped_column(
        sa.DateTime,
        nullable=False,
        server_default=sa.func.now(),
        onupdate=sa.func.now(),
        init=False,
        comment="Waktu perubahan"
    )

    # Revenue records of this partner
    revenues: Mapped[List["RevenueOrm"]] = relationship(
        back_populates="partner",
        lazy="noload",
        init=False
    )
