import math
from datetime import datetime, MINYEAR
from typing import List, Dict, Any

from src.config import TZ
from src.database.models.revenue import RevenueOrm
from src.repositories.partner import PartnerRepository
from src.repositories.revenue import RevenueRepository
from src.schemas.revenue import RevenueReadSchema, RevenueCreateSchema, RevenueEditSchema, PaginationSchema, \
    RevenueListResponseSchema, PeriodSchema, MonthlyDetailSummarySchema, MonthlyTransactionSchema, \
    PartnerBreakdownSchema, ServiceBreakdownSchema, BreakdownSchema, MonthlyDetailResponseSchema, \
    MonthlyRevenueSchema, YearlySummarySchema, TopServiceSchema, TopPartnerSchema, YearlySummaryDataSchema, \
    OverviewSchema, MonthTotalSchema, CategoryBreakdownSchema, PaymentStatusBreakdownSchema, StatsOverviewDataSchema
from src.utils.common import MONTH_ABBREVIATIONS, MONTH_NAMES_ID, ZERO, to_decimal, round_money, calc_growth
from src.utils.enums import RevenueCategory, PaymentStatus, RevenueSortField, SortOrder
from src.utils.exceptions import BadRequestException, NotFoundException, ValidationException, DBDuplicateException

UNKNOWN_PARTNER = 'Unknown Partner'
INVOICE_CONFLICT_MESSAGE = 'Nomor invoice sudah digunakan'
PARTNER_NOT_FOUND_MESSAGE = 'Partner tidak ditemukan'
REVENUE_NOT_FOUND_MESSAGE = 'Data pendapatan tidak ditemukan'

# Fields that may be omitted on update but never set to null
NOT_NULLABLE_FIELDS = ['date', 'partner_id', 'category', 'service_type', 'amount', 'payment_status']


class RevenueService:

    def __init__(self, repository: RevenueRepository) -> None:
        self.repository = repository
        self.logger = repository.logger

    @property
    def user_email(self) -> str:
        return self.repository.user.email if self.repository.user else 'system'

    async def get_revenues(
        self,
        year: int | None,
        month: int | None,
        category: RevenueCategory | None,
        payment_status: PaymentStatus | None,
        page: int,
        limit: int
    ) -> RevenueListResponseSchema:
        total, revenues = await self.repository.get_revenues(
            year=year,
            month=month,
            category=category,
            payment_status=payment_status,
            page=page,
            limit=limit
        )
        return RevenueListResponseSchema(
            data=[RevenueReadSchema.model_validate(revenue) for revenue in revenues],
            pagination=PaginationSchema(
                total=total,
                page=page,
                limit=limit,
                total_pages=math.ceil(total / limit)
            )
        )

    async def get_revenue(self, revenue_id: int) -> RevenueReadSchema:
        revenue = await self.repository.get_revenue(revenue_id)
        if not revenue:
            raise NotFoundException(REVENUE_NOT_FOUND_MESSAGE)

        return RevenueReadSchema.model_validate(revenue)

    async def get_monthly_detail(
        self,
        year: int | None,
        month: int | None,
        partner_name: str | None,
        service_type: str | None,
        category: RevenueCategory | None,
        sort: str | None,
        order: str | None
    ) -> MonthlyDetailResponseSchema:
        if year is None or month is None:
            raise BadRequestException('Year and month are required')

        if not 1 <= month <= 12:
            raise BadRequestException('Month must be between 1 and 12')

        try:
            sort_field = RevenueSortField(sort or RevenueSortField.DATE)
        except ValueError:
            raise BadRequestException(f'Invalid sort field: {sort}')

        try:
            sort_order = SortOrder(order or SortOrder.DESC)
        except ValueError:
            raise BadRequestException(f'Invalid sort order: {order}')

        detail = await self.repository.get_monthly_detail(
            year=year,
            month=month,
            partner_name=partner_name.strip() if partner_name else None,
            service_type=service_type or None,
            category=category,
            sort_field=sort_field,
            sort_order=sort_order
        )

        summary = detail["summary"]
        transactions = [
            MonthlyTransactionSchema(
                id=revenue.id,
                date=revenue.date,
                partner=revenue.partner.name if revenue.partner else UNKNOWN_PARTNER,
                partner_id=revenue.partner_id,
                category=revenue.category,
                service_type=revenue.service_type,
                amount=to_decimal(revenue.amount),
                payment_status=revenue.payment_status,
                payment_method=revenue.payment_method,
                description=revenue.description,
                invoice_number=revenue.invoice_number,
            ) for revenue in detail["transactions"]
        ]
        by_partner = [
            PartnerBreakdownSchema(
                partner=row.name or UNKNOWN_PARTNER,
                amount=to_decimal(row.total),
                count=row.count
            ) for row in detail["by_partner"]
        ]
        by_service = [
            ServiceBreakdownSchema(
                service_type=row.service_type,
                category=row.category,
                amount=to_decimal(row.total),
                count=row.count
            ) for row in detail["by_service"]
        ]

        return MonthlyDetailResponseSchema(
            period=PeriodSchema(year=year, month=month, month_name=MONTH_NAMES_ID[month - 1]),
            summary=MonthlyDetailSummarySchema(
                total_amount=to_decimal(summary.total_amount),
                total_transactions=summary.total_transactions,
                aeronautika_amount=to_decimal(summary.aeronautika_amount),
                non_aeronautika_amount=to_decimal(summary.non_aeronautika_amount),
                aeronautika_count=summary.aeronautika_count,
                non_aeronautika_count=summary.non_aeronautika_count,
            ),
            transactions=transactions,
            breakdown=BreakdownSchema(by_partner=by_partner, by_service=by_service)
        )

    async def get_monthly_summary(self, year: int | None) -> List[MonthlyRevenueSchema]:
        year = year if year is not None else datetime.now(tz=TZ).year
        rows = await self.repository.get_month_category_totals(year)

        months: List[Dict[str, Any]] = [
            {"aeronautika": ZERO, "non_aeronautika": ZERO, "transactions": 0}
            for _ in MONTH_ABBREVIATIONS
        ]
        for row in rows:
            month = months[int(row.month) - 1]
            if row.category == RevenueCategory.AERONAUTIKA:
                month["aeronautika"] += to_decimal(row.total)
            else:
                month["non_aeronautika"] += to_decimal(row.total)

            month["transactions"] += row.count

        monthly_summary = [
            MonthlyRevenueSchema(
                month=MONTH_ABBREVIATIONS[index],
                aeronautika=month["aeronautika"],
                non_aeronautika=month["non_aeronautika"],
                total=month["aeronautika"] + month["non_aeronautika"],
                transactions=month["transactions"]
            ) for index, month in enumerate(months)
        ]
        return monthly_summary

    async def get_yearly_summary(self, year: int | None) -> YearlySummaryDataSchema:
        year = year if year is not None else datetime.now(tz=TZ).year
        totals = await self.repository.get_year_totals(year)
        top_services = await self.repository.get_top_services(year)
        top_partners = await self.repository.get_top_partners(year)

        return YearlySummaryDataSchema(
            summary=YearlySummarySchema(
                total_revenue=to_decimal(totals.total_revenue),
                total_transactions=totals.total_transactions,
                aeronautika_revenue=to_decimal(totals.aeronautika_revenue),
                non_aeronautika_revenue=to_decimal(totals.non_aeronautika_revenue),
                paid_amount=to_decimal(totals.paid_amount),
                pending_amount=to_decimal(totals.pending_amount),
                overdue_amount=to_decimal(totals.overdue_amount),
            ),
            top_services=[
                TopServiceSchema(name=row.service_type, amount=to_decimal(row.total), count=row.count)
                for row in top_services
            ],
            top_partners=[
                TopPartnerSchema(
                    id=row.id,
                    name=row.name or UNKNOWN_PARTNER,
                    amount=to_decimal(row.total),
                    count=row.count
                ) for row in top_partners
            ]
        )

    async def get_stats_overview(self, year: int | None) -> StatsOverviewDataSchema:
        year = year if year is not None else datetime.now(tz=TZ).year
        current = await self.repository.get_year_statistics(year)
        previous_revenue, previous_transactions = ZERO, 0
        if year > MINYEAR:
            previous = await self.repository.get_year_statistics(year - 1)
            previous_revenue, previous_transactions = previous.total_revenue, previous.total_transactions

        month_totals = {int(row.month): to_decimal(row.total) for row in await self.repository.get_month_totals(year)}
        categories = await self.repository.get_category_breakdown(year)
        statuses = await self.repository.get_payment_status_breakdown(year)

        overview = OverviewSchema(
            total_revenue=to_decimal(current.total_revenue),
            total_transactions=current.total_transactions,
            average_amount=round_money(current.average_amount),
            max_amount=to_decimal(current.max_amount),
            min_amount=to_decimal(current.min_amount),
            revenue_growth=calc_growth(current.total_revenue, previous_revenue),
            transaction_growth=calc_growth(current.total_transactions, previous_transactions),
        )

        return StatsOverviewDataSchema(
            overview=overview,
            monthly_growth=[
                MonthTotalSchema(month=month, total=month_totals.get(month, ZERO))
                for month in range(1, 13)
            ],
            category_breakdown=[
                CategoryBreakdownSchema(
                    category=row.category,
                    total=to_decimal(row.total),
                    count=row.count,
                    average=round_money(row.average)
                ) for row in categories
            ],
            payment_status_breakdown=[
                PaymentStatusBreakdownSchema(status=row.payment_status, total=to_decimal(row.total), count=row.count)
                for row in statuses
            ]
        )

    async def check_partner(self, partner_id: int) -> None:
        partner_repository = PartnerRepository(self.repository.session, self.repository.user)
        partner = await partner_repository.get_partner(partner_id)
        if not partner:
            raise BadRequestException(PARTNER_NOT_FOUND_MESSAGE)

    async def check_invoice_number(self, invoice_number: str | None, exclude_id: int | None = None) -> None:
        if invoice_number and await self.repository.invoice_number_exists(invoice_number, exclude_id):
            raise DBDuplicateException(INVOICE_CONFLICT_MESSAGE)

    async def create(self, create_schema: RevenueCreateSchema) -> RevenueReadSchema:
        await self.check_partner(create_schema.partner_id)
        await self.check_invoice_number(create_schema.invoice_number)

        revenue = RevenueOrm(**create_schema.model_dump())
        try:
            await self.repository.save_object(revenue)
        except DBDuplicateException:
            # Concurrent insert of the same invoice number
            raise DBDuplicateException(INVOICE_CONFLICT_MESSAGE)

        self.logger.info(f"Revenue {revenue.id} created by {self.user_email}")
        return await self.get_revenue(revenue.id)

    async def edit(self, revenue_id: int, edit_schema: RevenueEditSchema) -> RevenueReadSchema:
        revenue = await self.repository.get_revenue(revenue_id)
        if not revenue:
            raise NotFoundException(REVENUE_NOT_FOUND_MESSAGE)

        update_data = edit_schema.model_dump(exclude_unset=True)
        errors = [
            {"field": field, "message": "Field may not be null"}
            for field in NOT_NULLABLE_FIELDS
            if field in update_data and update_data[field] is None
        ]
        if errors:
            raise ValidationException(errors)

        period_start = update_data.get('period_start', revenue.period_start)
        period_end = update_data.get('period_end', revenue.period_end)
        if period_start and period_end and period_end < period_start:
            raise ValidationException([
                {"field": "period_end", "message": "period_end tidak boleh lebih awal dari period_start"}
            ])

        if 'partner_id' in update_data:
            await self.check_partner(update_data['partner_id'])

        if update_data.get('invoice_number'):
            await self.check_invoice_number(update_data['invoice_number'], exclude_id=revenue_id)

        try:
            await self.repository.update_object(revenue, update_data)
        except DBDuplicateException:
            raise DBDuplicateException(INVOICE_CONFLICT_MESSAGE)

        self.logger.info(f"Revenue {revenue_id} updated by {self.user_email}")
        return await self.get_revenue(revenue_id)

    async def delete(self, revenue_id: int) -> None:
        deleted = await self.repository.delete_revenues([revenue_id])
        if not deleted:
            raise NotFoundException(REVENUE_NOT_FOUND_MESSAGE)

        self.logger.info(f"Revenue {revenue_id} deleted by {self.user_email}")

    async def bulk_delete(self, revenue_ids: List[int] | None) -> int:
        if not revenue_ids:
            raise BadRequestException('IDs array is required')

        deleted = await self.repository.delete_revenues(list(set(revenue_ids)))
        if not deleted:
            raise NotFoundException('No revenues found')

        self.logger.info(
            f"{len(deleted)} revenues deleted by {self.user_email}: {', '.join(str(r.id) for r in deleted)}"
        )
        return len(deleted)
