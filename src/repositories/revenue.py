import traceback
from decimal import Decimal
from typing import List, Dict, Tuple, Any

import sqlalchemy as sa
from sqlalchemy import select as sa_select, func, case, delete as sa_delete, update as sa_update
from sqlalchemy.orm import joinedload, contains_eager

from src.config import TOP_LIMIT
from src.database.models.partner import PartnerOrm
from src.database.models.revenue import RevenueOrm
from src.repositories.base import BaseRepository
from src.utils.common import year_bounds, month_bounds, to_decimal, ZERO
from src.utils.enums import RevenueCategory, PaymentStatus, RevenueSortField, SortOrder
from src.utils.exceptions import DBException

AERONAUTIKA = RevenueOrm.category == RevenueCategory.AERONAUTIKA
NON_AERONAUTIKA = RevenueOrm.category == RevenueCategory.NON_AERONAUTIKA


def sum_amount_when(condition) -> Any:
    return func.coalesce(func.sum(case((condition, RevenueOrm.amount), else_=0)), 0)


def count_when(condition) -> Any:
    return func.count(case((condition, 1)))


def total_amount() -> Any:
    return func.coalesce(func.sum(RevenueOrm.amount), 0)


class RevenueRepository(BaseRepository):

    @staticmethod
    def period_conditions(year: int | None, month: int | None = None) -> List[Any]:
        # The month is only meaningful inside a year
        if year is None:
            return []

        begin, end = month_bounds(year, month) if month is not None else year_bounds(year)
        return [RevenueOrm.date >= begin, RevenueOrm.date <= end]

    async def get_revenues(
        self,
        year: int | None,
        month: int | None,
        category: RevenueCategory | None,
        payment_status: PaymentStatus | None,
        page: int,
        limit: int
    ) -> Tuple[int, List[RevenueOrm]]:
        conditions = self.period_conditions(year, month)
        if category:
            conditions.append(RevenueOrm.category == category)

        if payment_status:
            conditions.append(RevenueOrm.payment_status == payment_status)

        stmt = sa_select(func.count(RevenueOrm.id)).where(*conditions)
        total = await self.select_single_field(stmt)

        stmt = (
            sa_select(RevenueOrm)
            .options(joinedload(RevenueOrm.partner))
            .where(*conditions)
            .order_by(RevenueOrm.date.desc(), RevenueOrm.created_at.desc(), RevenueOrm.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        revenues = await self.select_all(stmt)
        return total or 0, revenues

    async def get_revenue(self, revenue_id: int) -> RevenueOrm | None:
        stmt = (
            sa_select(RevenueOrm)
            .options(joinedload(RevenueOrm.partner))
            .where(RevenueOrm.id == revenue_id)
        )
        revenue = await self.select_first(stmt)
        return revenue

    async def invoice_number_exists(self, invoice_number: str, exclude_id: int | None = None) -> bool:
        stmt = sa_select(RevenueOrm.id).where(RevenueOrm.invoice_number == invoice_number)
        if exclude_id:
            stmt = stmt.where(RevenueOrm.id != exclude_id)

        revenue_id = await self.select_single_field(stmt.limit(1))
        return revenue_id is not None

    async def get_monthly_detail(
        self,
        year: int,
        month: int,
        partner_name: str | None,
        service_type: str | None,
        category: RevenueCategory | None,
        sort_field: RevenueSortField,
        sort_order: SortOrder
    ) -> Dict[str, Any]:
        conditions = self.period_conditions(year, month)
        if service_type:
            conditions.append(RevenueOrm.service_type == service_type)

        if category:
            conditions.append(RevenueOrm.category == category)

        # A partner filter restricts rows, otherwise revenues without a partner are kept
        if partner_name:
            conditions.append(PartnerOrm.name.icontains(partner_name, autoescape=True))

        is_outer = not partner_name

        # Transactions
        sort_column = getattr(RevenueOrm, sort_field.value)
        ordering = sort_column.asc() if sort_order == SortOrder.ASC else sort_column.desc()
        stmt = (
            sa_select(RevenueOrm)
            .join(RevenueOrm.partner, isouter=is_outer)
            .options(contains_eager(RevenueOrm.partner))
            .where(*conditions)
            .order_by(ordering, RevenueOrm.id)
        )
        transactions = await self.select_all(stmt)

        # Summary
        stmt = (
            sa_select(
                total_amount().label("total_amount"),
                func.count(RevenueOrm.id).label("total_transactions"),
                sum_amount_when(AERONAUTIKA).label("aeronautika_amount"),
                sum_amount_when(NON_AERONAUTIKA).label("non_aeronautika_amount"),
                count_when(AERONAUTIKA).label("aeronautika_count"),
                count_when(NON_AERONAUTIKA).label("non_aeronautika_count"),
            )
            .select_from(RevenueOrm)
            .join(RevenueOrm.partner, isouter=is_outer)
            .where(*conditions)
        )
        summary = await self.select_first(stmt, scalars=False)

        # Breakdown by partner
        partner_total = func.sum(RevenueOrm.amount).label("total")
        stmt = (
            sa_select(
                PartnerOrm.id,
                PartnerOrm.name,
                partner_total,
                func.count(RevenueOrm.id).label("count")
            )
            .select_from(RevenueOrm)
            .join(RevenueOrm.partner, isouter=is_outer)
            .where(*conditions)
            .group_by(PartnerOrm.id, PartnerOrm.name)
            .order_by(partner_total.desc(), PartnerOrm.name)
        )
        by_partner = await self.select_all(stmt, scalars=False)

        # Breakdown by service type and category
        service_total = func.sum(RevenueOrm.amount).label("total")
        stmt = (
            sa_select(
                RevenueOrm.service_type,
                RevenueOrm.category,
                service_total,
                func.count(RevenueOrm.id).label("count")
            )
            .select_from(RevenueOrm)
            .join(RevenueOrm.partner, isouter=is_outer)
            .where(*conditions)
            .group_by(RevenueOrm.service_type, RevenueOrm.category)
            .order_by(service_total.desc(), RevenueOrm.service_type)
        )
        by_service = await self.select_all(stmt, scalars=False)

        return {
            "transactions": transactions,
            "summary": summary,
            "by_partner": by_partner,
            "by_service": by_service,
        }

    async def get_month_category_totals(self, year: int) -> List[Any]:
        month_ = sa.extract('month', RevenueOrm.date).label("month")
        stmt = (
            sa_select(
                month_,
                RevenueOrm.category,
                func.sum(RevenueOrm.amount).label("total"),
                func.count(RevenueOrm.id).label("count")
            )
            .where(*self.period_conditions(year))
            .group_by(month_, RevenueOrm.category)
            .order_by(month_)
        )
        dataset = await self.select_all(stmt, scalars=False)
        return dataset

    async def get_year_totals(self, year: int) -> Any:
        stmt = (
            sa_select(
                total_amount().label("total_revenue"),
                func.count(RevenueOrm.id).label("total_transactions"),
                sum_amount_when(AERONAUTIKA).label("aeronautika_revenue"),
                sum_amount_when(NON_AERONAUTIKA).label("non_aeronautika_revenue"),
                sum_amount_when(RevenueOrm.payment_status == PaymentStatus.PAID).label("paid_amount"),
                sum_amount_when(RevenueOrm.payment_status == PaymentStatus.PENDING).label("pending_amount"),
                sum_amount_when(RevenueOrm.payment_status == PaymentStatus.OVERDUE).label("overdue_amount"),
            )
            .where(*self.period_conditions(year))
        )
        totals = await self.select_first(stmt, scalars=False)
        return totals

    async def get_top_services(self, year: int, limit: int = TOP_LIMIT) -> List[Any]:
        total = func.sum(RevenueOrm.amount).label("total")
        stmt = (
            sa_select(RevenueOrm.service_type, total, func.count(RevenueOrm.id).label("count"))
            .where(*self.period_conditions(year))
            .group_by(RevenueOrm.service_type)
            .order_by(total.desc(), RevenueOrm.service_type)
            .limit(limit)
        )
        dataset = await self.select_all(stmt, scalars=False)
        return dataset

    async def get_top_partners(self, year: int, limit: int = TOP_LIMIT) -> List[Any]:
        total = func.sum(RevenueOrm.amount).label("total")
        stmt = (
            sa_select(PartnerOrm.id, PartnerOrm.name, total, func.count(RevenueOrm.id).label("count"))
            .select_from(RevenueOrm)
            .join(RevenueOrm.partner, isouter=True)
            .where(*self.period_conditions(year))
            .group_by(PartnerOrm.id, PartnerOrm.name)
            .order_by(total.desc(), PartnerOrm.name)
            .limit(limit)
        )
        dataset = await self.select_all(stmt, scalars=False)
        return dataset

    async def get_year_statistics(self, year: int) -> Any:
        stmt = (
            sa_select(
                total_amount().label("total_revenue"),
                func.count(RevenueOrm.id).label("total_transactions"),
                func.avg(RevenueOrm.amount).label("average_amount"),
                func.max(RevenueOrm.amount).label("max_amount"),
                func.min(RevenueOrm.amount).label("min_amount"),
            )
            .where(*self.period_conditions(year))
        )
        statistics = await self.select_first(stmt, scalars=False)
        return statistics

    async def get_month_totals(self, year: int) -> List[Any]:
        month_ = sa.extract('month', RevenueOrm.date).label("month")
        stmt = (
            sa_select(month_, func.sum(RevenueOrm.amount).label("total"))
            .where(*self.period_conditions(year))
            .group_by(month_)
            .order_by(month_)
        )
        dataset = await self.select_all(stmt, scalars=False)
        return dataset

    async def get_category_breakdown(self, year: int) -> List[Any]:
        stmt = (
            sa_select(
                RevenueOrm.category,
                func.sum(RevenueOrm.amount).label("total"),
                func.count(RevenueOrm.id).label("count"),
                func.avg(RevenueOrm.amount).label("average")
            )
            .where(*self.period_conditions(year))
            .group_by(RevenueOrm.category)
            .order_by(RevenueOrm.category)
        )
        dataset = await self.select_all(stmt, scalars=False)
        return dataset

    async def get_payment_status_breakdown(self, year: int) -> List[Any]:
        stmt = (
            sa_select(
                RevenueOrm.payment_status,
                func.sum(RevenueOrm.amount).label("total"),
                func.count(RevenueOrm.id).label("count")
            )
            .where(*self.period_conditions(year))
            .group_by(RevenueOrm.payment_status)
            .order_by(RevenueOrm.payment_status)
        )
        dataset = await self.select_all(stmt, scalars=False)
        return dataset

    @staticmethod
    def group_by_partner(revenues: List[RevenueOrm]) -> Dict[int, Tuple[int, Decimal]]:
        decrements: Dict[int, Tuple[int, Decimal]] = {}
        for revenue in revenues:
            count, amount = decrements.get(revenue.partner_id, (0, ZERO))
            decrements[revenue.partner_id] = (count + 1, amount + to_decimal(revenue.amount))

        return decrements

    @staticmethod
    def partner_decrement_stmt(partner_id: int, count: int, amount: Decimal) -> Any:
        # Totals never go below zero, even if they have drifted from the ledger
        new_count = PartnerOrm.total_transactions - count
        new_amount = PartnerOrm.total_amount - amount
        stmt = (
            sa_update(PartnerOrm)
            .where(PartnerOrm.id == partner_id)
            .values(
                total_transactions=case((new_count < 0, 0), else_=new_count),
                total_amount=case((new_amount < 0, 0), else_=new_amount)
            )
            .execution_options(synchronize_session=False)
        )
        return stmt

    async def delete_revenues(self, revenue_ids: List[int]) -> List[RevenueOrm]:
        """
        Deletes the revenues that exist among revenue_ids and decrements the totals of their partners.
        Everything happens in a single transaction. Returns the deleted revenues.
        """
        try:
            stmt = sa_select(RevenueOrm).where(RevenueOrm.id.in_(revenue_ids))
            revenues = (await self.session.scalars(stmt)).all()
            if not revenues:
                await self.session.rollback()
                return []

            decrements = self.group_by_partner(revenues)

            stmt = (
                sa_delete(RevenueOrm)
                .where(RevenueOrm.id.in_([revenue.id for revenue in revenues]))
                .execution_options(synchronize_session=False)
            )
            await self.session.execute(stmt)

            for partner_id, (count, amount) in decrements.items():
                await self.session.execute(self.partner_decrement_stmt(partner_id, count, amount))

            await self.session.commit()
            return list(revenues)

        except Exception:
            await self.session.rollback()
            self.logger.error(traceback.format_exc())
            raise DBException()
