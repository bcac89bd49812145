import datetime
from decimal import Decimal

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.config import SCHEMA
from src.database.models.base import Base
from src.utils.enums import RevenueCategory, PaymentStatus


def enum_values(enum_class) -> list[str]:
    return [member.value for member in enum_class]


class RevenueOrm(Base):
    __tablename__ = "revenue"
    __table_args__ = (
        sa.CheckConstraint("amount >= 0", name="revenue_amount_non_negative"),
        sa.Index("ix_revenue_date_category", "date", "category"),
        {'comment': 'Pendapatan'}
    )

    date: Mapped[datetime.date] = mapped_column(
        sa.Date,
        nullable=False,
        comment="Tanggal transaksi"
    )

    # Partner
    partner_id: Mapped[int] = mapped_column(
        sa.ForeignKey(f"{SCHEMA}.partner.id" if SCHEMA else "partner.id"),
        nullable=False,
        index=True,
        comment="Mitra"
    )

    category: Mapped[RevenueCategory] = mapped_column(
        sa.Enum(RevenueCategory, name="revenuecategory", values_callable=enum_values),
        nullable=False,
        comment="Kategori"
    )

    service_type: Mapped[str] = mapped_column(
        sa.String(255),
        nullable=False,
        comment="Jenis layanan"
    )

    amount: Mapped[Decimal] = mapped_column(
        sa.Numeric(15, 2),
        nullable=False,
        comment="Jumlah"
    )

    payment_status: Mapped[PaymentStatus] = mapped_column(
        sa.Enum(PaymentStatus, name="paymentstatus", values_callable=enum_values),
        nullable=False,
        comment="Status pembayaran"
    )

    payment_method: Mapped[str | None] = mapped_column(
        sa.String(100),
        nullable=True,
        default=None,
        comment="Metode pembayaran"
    )

    invoice_number: Mapped[str | None] = mapped_column(
        sa.String(100),
        nullable=True,
        unique=True,
        default=None,
        comment="Nomor invoice"
    )

    description: Mapped[str | None] = mapped_column(
        sa.Text,
        nullable=True,
        default=None,
        comment="Keterangan"
    )

    period_start: Mapped[datetime.date | None] = mapped_column(
        sa.Date,
        nullable=True,
        default=None,
        comment="Awal periode tagihan"
    )

    period_end: Mapped[datetime.date | None] = mapped_column(
        sa.Date,
        nullable=True,
        default=None,
        comment="Akhir periode tagihan"
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

    # Partner
    partner: Mapped["PartnerOrm"] = relationship(
        back_populates="revenues",
        lazy="noload",
        init=False
    )
