import asyncio
import json
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Set

from pydantic import ValidationError

from src.client.api import RevenueApiClient, ApiClientError
from src.config import TZ, DEFAULT_PAGE_LIMIT, TOP_LIMIT
from src.schemas.revenue import RevenueReadSchema, MonthlyRevenueSchema, YearlySummaryDataSchema, \
    MonthlyDetailResponseSchema, PaginationSchema, RevenueCreateSchema, RevenueEditSchema
from src.utils.common import ZERO, to_decimal
from src.utils.enums import RevenueCategory, StoreState
from src.utils.loggers import get_logger

TOLERANCE = Decimal("0.01")
PERCENT = Decimal("0.1")
UNKNOWN_PARTNER = 'Unknown Partner'

SLOTS = ("revenue", "monthly", "summary", "detail")


@dataclass
class ActionResult:
    success: bool
    message: str | None = None
    data: Any = None


@dataclass
class Discrepancy:
    metric: str
    source: str
    other_source: str
    value: Decimal
    other_value: Decimal

    @property
    def difference(self) -> Decimal:
        return self.value - self.other_value


@dataclass
class ServiceTotal:
    name: str
    amount: Decimal


@dataclass
class PartnerShare:
    id: int | None
    name: str
    amount: Decimal = ZERO
    transactions: int = 0
    percentage: Decimal = ZERO


@dataclass
class Totals:
    total: Decimal = ZERO
    aeronautika: Decimal = ZERO
    non_aeronautika: Decimal = ZERO


def empty_pagination() -> PaginationSchema:
    return PaginationSchema(total=0, page=1, limit=DEFAULT_PAGE_LIMIT, total_pages=0)


@dataclass
class RevenueStore:
    """
    Local working copy of the revenue ledger and its aggregates.

    Every fetch has its own loading flag and error slot, so one failed request
    never hides the data of the others. Mutations are applied in two phases:
    the confirmed result is applied locally at once, then the aggregates of
    the active year are refreshed in the background (see wait_for_refresh).
    """
    api: RevenueApiClient
    current_year: int = field(default_factory=lambda: datetime.now(tz=TZ).year)
    state: StoreState = StoreState.INITIALIZED

    revenue_data: List[RevenueReadSchema] = field(default_factory=list)
    monthly_data: List[MonthlyRevenueSchema] = field(default_factory=list)
    summary: YearlySummaryDataSchema | None = None
    monthly_detail: MonthlyDetailResponseSchema | None = None
    pagination: PaginationSchema = field(default_factory=empty_pagination)

    loading: Dict[str, bool] = field(default_factory=lambda: {slot: False for slot in SLOTS})
    errors: Dict[str, str | None] = field(default_factory=lambda: {slot: None for slot in SLOTS})

    last_updated: datetime | None = None
    refresh_task: asyncio.Task | None = field(default=None, repr=False)
    # Strong references to every pending refresh, the event loop keeps only weak ones
    refresh_tasks: Set[asyncio.Task] = field(default_factory=set, repr=False)

    def __post_init__(self):
        self.logger = get_logger(name="REVENUE-STORE")

    """
    Derived views
    """

    @property
    def total_revenue(self) -> Decimal:
        return sum((to_decimal(item.amount) for item in self.revenue_data), ZERO)

    def category_revenue(self, category: RevenueCategory) -> Decimal:
        return sum((to_decimal(item.amount) for item in self.revenue_data if item.category == category), ZERO)

    @property
    def aeronautika_revenue(self) -> Decimal:
        return self.category_revenue(RevenueCategory.AERONAUTIKA)

    @property
    def non_aeronautika_revenue(self) -> Decimal:
        return self.category_revenue(RevenueCategory.NON_AERONAUTIKA)

    @property
    def top_services(self) -> List[ServiceTotal]:
        services: Dict[str, Decimal] = {}
        for item in self.revenue_data:
            services[item.service_type] = services.get(item.service_type, ZERO) + to_decimal(item.amount)

        top = sorted(services.items(), key=lambda service: (-service[1], service[0]))[:TOP_LIMIT]
        return [ServiceTotal(name=name, amount=amount) for name, amount in top]

    @property
    def top_partners(self) -> List[PartnerShare]:
        total = self.total_revenue
        partners: Dict[tuple, PartnerShare] = {}
        for item in self.revenue_data:
            if item.partner:
                partner_id, name = item.partner.id, item.partner.name
            else:
                partner_id, name = item.partner_id, UNKNOWN_PARTNER

            share = partners.setdefault((partner_id, name), PartnerShare(id=partner_id, name=name))
            share.amount += to_decimal(item.amount)
            share.transactions += 1

        for share in partners.values():
            share.percentage = (share.amount / total * 100).quantize(PERCENT) if total > 0 else ZERO

        return sorted(partners.values(), key=lambda share: (-share.amount, share.name))[:TOP_LIMIT]

    @property
    def is_loading(self) -> bool:
        return any(self.loading.values())

    @property
    def has_errors(self) -> bool:
        return any(error is not None for error in self.errors.values())

    def get_revenue_by_id(self, revenue_id: int) -> RevenueReadSchema | None:
        for item in self.revenue_data:
            if item.id == revenue_id:
                return item
        return None

    def filter_revenue_data(
        self,
        category: RevenueCategory | str | None = None,
        service_type: str | None = None,
        partner_id: int | None = None,
        payment_status: str | None = None,
        start_date: date | None = None,
        end_date: date | None = None
    ) -> List[RevenueReadSchema]:
        filtered = list(self.revenue_data)
        if category:
            filtered = [item for item in filtered if item.category == category]

        if service_type:
            filtered = [item for item in filtered if item.service_type == service_type]

        if partner_id:
            filtered = [
                item for item in filtered
                if (item.partner.id if item.partner else item.partner_id) == partner_id
            ]

        if payment_status:
            filtered = [item for item in filtered if item.payment_status == payment_status]

        # The date range applies only when both bounds are given
        if start_date and end_date:
            filtered = [item for item in filtered if start_date <= item.date <= end_date]

        return filtered

    """
    Fetches
    """

    async def fetch_revenue_data(self, **params) -> ActionResult:
        self.loading["revenue"] = True
        self.errors["revenue"] = None
        try:
            response = await self.api.get_revenues(**params)
            self.revenue_data = response.data
            self.pagination = response.pagination
            self.last_updated = datetime.now(tz=TZ)
            self.state = StoreState.POPULATED
            self.logger.info(f"Loaded {len(self.revenue_data)} revenue items")
            return ActionResult(success=True, data=self.revenue_data)

        except (ApiClientError, ValidationError) as e:
            self.errors["revenue"] = self.error_message(e, 'Failed to fetch revenue data')
            self.logger.error(f"Fetch revenue error: {self.errors['revenue']}")
            self.revenue_data = []
            return ActionResult(success=False, message=self.errors["revenue"])

        finally:
            self.loading["revenue"] = False

    async def fetch_monthly_data(self, year: int | None = None) -> ActionResult:
        self.loading["monthly"] = True
        self.errors["monthly"] = None
        try:
            self.monthly_data = await self.api.get_monthly(year or self.current_year)
            return ActionResult(success=True, data=self.monthly_data)

        except (ApiClientError, ValidationError) as e:
            self.errors["monthly"] = self.error_message(e, 'Failed to fetch monthly data')
            self.logger.error(f"Fetch monthly error: {self.errors['monthly']}")
            self.monthly_data = []
            return ActionResult(success=False, message=self.errors["monthly"])

        finally:
            self.loading["monthly"] = False

    async def fetch_summary(self, year: int | None = None) -> ActionResult:
        self.loading["summary"] = True
        self.errors["summary"] = None
        try:
            self.summary = await self.api.get_summary(year or self.current_year)
            return ActionResult(success=True, data=self.summary)

        except (ApiClientError, ValidationError) as e:
            self.errors["summary"] = self.error_message(e, 'Failed to fetch summary')
            self.logger.error(f"Fetch summary error: {self.errors['summary']}")
            self.summary = None
            return ActionResult(success=False, message=self.errors["summary"])

        finally:
            self.loading["summary"] = False

    async def fetch_monthly_detail(self, year: int, month: int, **filters) -> ActionResult:
        self.loading["detail"] = True
        self.errors["detail"] = None
        try:
            self.monthly_detail = await self.api.get_monthly_detail(year, month, **filters)
            return ActionResult(success=True, data=self.monthly_detail)

        except (ApiClientError, ValidationError) as e:
            # Previous detail stays on screen
            self.errors["detail"] = self.error_message(e, 'Failed to fetch monthly detail')
            self.logger.error(f"Fetch monthly detail error: {self.errors['detail']}")
            return ActionResult(success=False, message=self.errors["detail"])

        finally:
            self.loading["detail"] = False

    async def refresh_all_data(self, year: int | None = None) -> ActionResult:
        if year:
            self.current_year = year

        self.logger.info(f"Refreshing all data for year {self.current_year}")
        self.clear_errors()
        results = await asyncio.gather(
            self.fetch_revenue_data(year=self.current_year),
            self.fetch_monthly_data(self.current_year),
            self.fetch_summary(self.current_year),
            return_exceptions=True
        )

        failures = [
            result for result in results
            if isinstance(result, BaseException) or not result.success
        ]
        if failures:
            self.logger.error(f"Some data failed to load: {failures}")
            return ActionResult(success=False, message='Partial data load failure')

        self.verify_data_consistency()
        return ActionResult(success=True)

    async def refresh_aggregates(self) -> None:
        await asyncio.gather(
            self.fetch_monthly_data(self.current_year),
            self.fetch_summary(self.current_year)
        )

    def schedule_refresh(self) -> asyncio.Task:
        task = asyncio.create_task(self.refresh_aggregates())
        self.refresh_tasks.add(task)
        task.add_done_callback(self.refresh_tasks.discard)
        self.refresh_task = task
        return task

    async def wait_for_refresh(self) -> None:
        """
        Waits for every scheduled aggregate refresh, including the ones started by earlier mutations.
        """
        while self.refresh_tasks:
            await asyncio.gather(*self.refresh_tasks)

    """
    Mutations
    """

    async def add_revenue_data(self, data: RevenueCreateSchema) -> ActionResult:
        try:
            revenue = await self.api.create_revenue(data)
        except (ApiClientError, ValidationError) as e:
            message = self.error_message(e, 'Failed to add revenue')
            self.logger.error(f"Add revenue error: {message}")
            return ActionResult(success=False, message=message)

        self.revenue_data.insert(0, revenue)
        self.schedule_refresh()
        self.logger.info(f"Revenue {revenue.id} added")
        return ActionResult(success=True, data=revenue)

    async def update_revenue_data(self, revenue_id: int, data: RevenueEditSchema) -> ActionResult:
        try:
            revenue = await self.api.update_revenue(revenue_id, data)
        except (ApiClientError, ValidationError) as e:
            message = self.error_message(e, 'Failed to update revenue')
            self.logger.error(f"Update revenue error: {message}")
            return ActionResult(success=False, message=message)

        for index, item in enumerate(self.revenue_data):
            if item.id == revenue_id:
                self.revenue_data[index] = revenue
                break

        self.schedule_refresh()
        self.logger.info(f"Revenue {revenue_id} updated")
        return ActionResult(success=True, data=revenue)

    async def delete_revenue_data(self, revenue_id: int) -> ActionResult:
        try:
            message = await self.api.delete_revenue(revenue_id)
        except ApiClientError as e:
            message = self.error_message(e, 'Failed to delete revenue')
            self.logger.error(f"Delete revenue error: {message}")
            return ActionResult(success=False, message=message)

        self.revenue_data = [item for item in self.revenue_data if item.id != revenue_id]
        self.schedule_refresh()
        self.logger.info(f"Revenue {revenue_id} deleted")
        return ActionResult(success=True, message=message)

    async def bulk_delete_revenue_data(self, revenue_ids: List[int]) -> ActionResult:
        try:
            response = await self.api.bulk_delete_revenues(revenue_ids)
        except (ApiClientError, ValidationError) as e:
            message = self.error_message(e, 'Failed to delete revenues')
            self.logger.error(f"Bulk delete error: {message}")
            return ActionResult(success=False, message=message)

        ids = set(revenue_ids)
        self.revenue_data = [item for item in self.revenue_data if item.id not in ids]
        self.schedule_refresh()
        self.logger.info(response.message)
        return ActionResult(success=True, message=response.message, data=response.deleted)

    """
    Consistency
    """

    def local_totals(self) -> Totals:
        return Totals(
            total=self.total_revenue,
            aeronautika=self.aeronautika_revenue,
            non_aeronautika=self.non_aeronautika_revenue
        )

    def monthly_totals(self) -> Totals:
        totals = Totals()
        for month in self.monthly_data:
            totals.total += to_decimal(month.total)
            totals.aeronautika += to_decimal(month.aeronautika)
            totals.non_aeronautika += to_decimal(month.non_aeronautika)
        return totals

    def summary_totals(self) -> Totals:
        if not self.summary:
            return Totals()

        return Totals(
            total=to_decimal(self.summary.summary.total_revenue),
            aeronautika=to_decimal(self.summary.summary.aeronautika_revenue),
            non_aeronautika=to_decimal(self.summary.summary.non_aeronautika_revenue)
        )

    def verify_data_consistency(self) -> List[Discrepancy]:
        """
        Compares the totals of the local copy, the monthly series and the yearly summary.
        Every pairwise difference above one cent is logged as a warning.
        """
        sources = {
            "revenue": self.local_totals(),
            "monthly": self.monthly_totals(),
            "summary": self.summary_totals(),
        }
        self.logger.info(
            "Consistency check: " + "; ".join(
                f"{name}: total={totals.total} aeronautika={totals.aeronautika} "
                f"non_aeronautika={totals.non_aeronautika}"
                for name, totals in sources.items()
            )
        )

        names = list(sources)
        discrepancies = []
        for metric in ("total", "aeronautika", "non_aeronautika"):
            for i, source in enumerate(names):
                for other_source in names[i + 1:]:
                    value = getattr(sources[source], metric)
                    other_value = getattr(sources[other_source], metric)
                    if abs(value - other_value) > TOLERANCE:
                        discrepancy = Discrepancy(
                            metric=metric,
                            source=source,
                            other_source=other_source,
                            value=value,
                            other_value=other_value
                        )
                        self.logger.warning(
                            f"Discrepancy in {metric} between {source} and {other_source}: "
                            f"{value} vs {other_value}, difference {discrepancy.difference}"
                        )
                        discrepancies.append(discrepancy)

        return discrepancies

    """
    State
    """

    def clear_errors(self) -> None:
        self.errors = {slot: None for slot in SLOTS}

    def clear_monthly_detail(self) -> None:
        self.monthly_detail = None
        self.errors["detail"] = None

    def clear_all_data(self) -> None:
        self.revenue_data = []
        self.monthly_data = []
        self.summary = None
        self.monthly_detail = None
        self.pagination = empty_pagination()
        self.clear_errors()
        self.last_updated = None
        self.state = StoreState.CLEARED
        self.logger.info("All revenue data cleared")

    def set_current_year(self, year: int) -> None:
        self.current_year = year

    def export_data(self) -> str:
        data = {
            "revenue": [item.model_dump(mode='json') for item in self.revenue_data],
            "monthly": [month.model_dump(mode='json', by_alias=True) for month in self.monthly_data],
            "summary": self.summary.model_dump(mode='json', by_alias=True) if self.summary else {},
            "metadata": {
                "exported_at": datetime.now(tz=TZ).isoformat(),
                "year": self.current_year,
                "total_records": len(self.revenue_data),
            }
        }
        return json.dumps(data, indent=2, ensure_ascii=False)

    @staticmethod
    def error_message(error: Exception, default: str) -> str:
        if isinstance(error, ApiClientError) and error.message:
            return error.message
        return default
