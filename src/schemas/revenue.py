from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, List

from pydantic import Field, StringConstraints, BeforeValidator, model_validator

from src.schemas.base import BaseSchema, CamelSchema
from src.schemas.common import SuccessSchema, SuccessMessageSchema
from src.schemas.partner import PartnerMinimumSchema
from src.schemas.validators import Money, EmptyStrToNone, OptionalShortStr, empty_str_to_none
from src.utils.enums import RevenueCategory, PaymentStatus

id_ = Annotated[int, Field(description="ID pendapatan", examples=[1])]

date_ = Annotated[date, Field(description="Tanggal transaksi", examples=["2024-03-15"])]

partner_id_ = Annotated[int, Field(description="ID mitra", examples=[1])]

category_ = Annotated[RevenueCategory, Field(description="Kategori", examples=[RevenueCategory.AERONAUTIKA.value])]

service_type_ = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=1, max_length=255),
    Field(description="Jenis layanan", examples=["landing_fee"])
]

amount_in_ = Annotated[
    Decimal,
    Field(description="Jumlah, Rp", examples=[5000], ge=0, max_digits=15, decimal_places=2)
]

amount_ = Annotated[Money, Field(description="Jumlah, Rp", examples=[5000.0])]

payment_status_ = Annotated[PaymentStatus, Field(description="Status pembayaran", examples=[PaymentStatus.PAID.value])]

payment_method_ = Annotated[OptionalShortStr, Field(description="Metode pembayaran", examples=["transfer"])]

invoice_number_ = Annotated[OptionalShortStr, Field(description="Nomor invoice", examples=["INV-001"])]

description_ = Annotated[EmptyStrToNone, Field(description="Keterangan", examples=[""])]

period_date_ = Annotated[date | None, BeforeValidator(empty_str_to_none)]

period_start_ = Annotated[period_date_, Field(description="Awal periode tagihan", examples=["2024-03-01"])]

period_end_ = Annotated[period_date_, Field(description="Akhir periode tagihan", examples=["2024-03-31"])]

count_ = Annotated[int, Field(description="Jumlah transaksi", examples=[3])]


class PeriodCheckSchema(BaseSchema):

    @model_validator(mode='after')
    def check_period(self):
        if self.period_start and self.period_end and self.period_end < self.period_start:
            raise ValueError("period_end tidak boleh lebih awal dari period_start")
        return self


class RevenueReadSchema(BaseSchema):
    id: id_
    date: date_
    partner_id: partner_id_
    partner: Annotated[PartnerMinimumSchema | None, Field(description="Mitra")] = None
    category: category_
    service_type: Annotated[str, Field(description="Jenis layanan", examples=["landing_fee"])]
    amount: amount_
    payment_status: payment_status_
    payment_method: Annotated[str | None, Field(description="Metode pembayaran")] = None
    invoice_number: Annotated[str | None, Field(description="Nomor invoice")] = None
    description: Annotated[str | None, Field(description="Keterangan")] = None
    period_start: Annotated[date | None, Field(description="Awal periode tagihan")] = None
    period_end: Annotated[date | None, Field(description="Akhir periode tagihan")] = None
    created_at: Annotated[datetime | None, Field(description="Waktu pembuatan")] = None
    updated_at: Annotated[datetime | None, Field(description="Waktu perubahan")] = None


class RevenueCreateSchema(PeriodCheckSchema):
    date: date_
    partner_id: partner_id_
    category: category_
    service_type: service_type_
    amount: amount_in_
    payment_status: payment_status_
    invoice_number: invoice_number_ = None
    payment_method: payment_method_ = None
    description: description_ = None
    period_start: period_start_ = None
    period_end: period_end_ = None


class RevenueEditSchema(PeriodCheckSchema):
    date: date_ | None = None
    partner_id: partner_id_ | None = None
    category: category_ | None = None
    service_type: service_type_ | None = None
    amount: amount_in_ | None = None
    payment_status: payment_status_ | None = None
    invoice_number: invoice_number_ = None
    payment_method: payment_method_ = None
    description: description_ = None
    period_start: period_start_ = None
    period_end: period_end_ = None


class BulkDeleteSchema(BaseSchema):
    ids: Annotated[List[int] | None, Field(description="Daftar ID pendapatan", examples=[[1, 2, 3]])] = None


class BulkDeleteResponseSchema(SuccessMessageSchema):
    deleted: Annotated[int, Field(description="Jumlah data yang dihapus", examples=[3])]


class PaginationSchema(CamelSchema):
    total: Annotated[int, Field(description="Jumlah seluruh data", examples=[120])]
    page: Annotated[int, Field(description="Halaman", examples=[1])]
    limit: Annotated[int, Field(description="Data per halaman", examples=[100])]
    total_pages: Annotated[int, Field(description="Jumlah halaman", examples=[2])]


class RevenueListResponseSchema(SuccessSchema):
    data: List[RevenueReadSchema]
    pagination: PaginationSchema


class RevenueResponseSchema(SuccessSchema):
    data: RevenueReadSchema


"""
Monthly detail
"""


class PeriodSchema(CamelSchema):
    year: Annotated[int, Field(description="Tahun", examples=[2024])]
    month: Annotated[int, Field(description="Bulan", examples=[3])]
    month_name: Annotated[str, Field(description="Nama bulan", examples=["Maret"])]


class MonthlyDetailSummarySchema(CamelSchema):
    total_amount: amount_
    total_transactions: count_
    aeronautika_amount: amount_
    non_aeronautika_amount: amount_
    aeronautika_count: count_
    non_aeronautika_count: count_


class MonthlyTransactionSchema(BaseSchema):
    id: id_
    date: date_
    partner: Annotated[str, Field(description="Nama mitra", examples=["PT Garuda Indonesia"])]
    partner_id: partner_id_
    category: category_
    service_type: Annotated[str, Field(description="Jenis layanan", examples=["landing_fee"])]
    amount: amount_
    payment_status: payment_status_
    payment_method: str | None = None
    description: str | None = None
    invoice_number: str | None = None


class PartnerBreakdownSchema(CamelSchema):
    partner: Annotated[str, Field(description="Nama mitra", examples=["PT Garuda Indonesia"])]
    amount: amount_
    count: count_


class ServiceBreakdownSchema(CamelSchema):
    service_type: Annotated[str, Field(description="Jenis layanan", examples=["landing_fee"])]
    category: category_
    amount: amount_
    count: count_


class BreakdownSchema(CamelSchema):
    by_partner: List[PartnerBreakdownSchema]
    by_service: List[ServiceBreakdownSchema]


class MonthlyDetailResponseSchema(CamelSchema):
    success: bool = True
    period: PeriodSchema
    summary: MonthlyDetailSummarySchema
    transactions: List[MonthlyTransactionSchema]
    breakdown: BreakdownSchema


"""
Monthly summary for a year
"""


class MonthlyRevenueSchema(CamelSchema):
    month: Annotated[str, Field(description="Bulan", examples=["Jan"])]
    aeronautika: amount_
    non_aeronautika: amount_
    total: amount_
    transactions: count_


"""
Yearly summary
"""


class YearlySummarySchema(CamelSchema):
    total_revenue: amount_
    total_transactions: count_
    aeronautika_revenue: amount_
    non_aeronautika_revenue: amount_
    paid_amount: amount_
    pending_amount: amount_
    overdue_amount: amount_


class TopServiceSchema(CamelSchema):
    name: Annotated[str, Field(description="Jenis layanan", examples=["landing_fee"])]
    amount: amount_
    count: count_


class TopPartnerSchema(CamelSchema):
    id: Annotated[int | None, Field(description="ID mitra", examples=[1])] = None
    name: Annotated[str, Field(description="Nama mitra", examples=["PT Garuda Indonesia"])]
    amount: amount_
    count: count_


class YearlySummaryDataSchema(CamelSchema):
    summary: YearlySummarySchema
    top_services: List[TopServiceSchema]
    top_partners: List[TopPartnerSchema]


class YearlySummaryResponseSchema(SuccessSchema):
    data: YearlySummaryDataSchema


"""
Statistics overview
"""


class OverviewSchema(CamelSchema):
    total_revenue: amount_
    total_transactions: count_
    average_amount: amount_
    max_amount: amount_
    min_amount: amount_
    revenue_growth: Annotated[Money, Field(description="Pertumbuhan pendapatan, %", examples=[12.5])]
    transaction_growth: Annotated[Money, Field(description="Pertumbuhan jumlah transaksi, %", examples=[-3.25])]


class MonthTotalSchema(CamelSchema):
    month: Annotated[int, Field(description="Bulan", examples=[1])]
    total: amount_


class CategoryBreakdownSchema(CamelSchema):
    category: category_
    total: amount_
    count: count_
    average: amount_


class PaymentStatusBreakdownSchema(CamelSchema):
    status: payment_status_
    total: amount_
    count: count_


class StatsOverviewDataSchema(CamelSchema):
    overview: OverviewSchema
    monthly_growth: List[MonthTotalSchema]
    category_breakdown: List[CategoryBreakdownSchema]
    payment_status_breakdown: List[PaymentStatusBreakdownSchema]


class StatsOverviewResponseSchema(SuccessSchema):
    data: StatsOverviewDataSchema
