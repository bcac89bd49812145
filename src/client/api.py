from typing import Any, Dict, List

import httpx
from pydantic import TypeAdapter

from src.config import API_URL, API_TIMEOUT
from src.schemas.revenue import RevenueListResponseSchema, MonthlyRevenueSchema, YearlySummaryResponseSchema, \
    YearlySummaryDataSchema, MonthlyDetailResponseSchema, StatsOverviewResponseSchema, StatsOverviewDataSchema, \
    RevenueResponseSchema, RevenueReadSchema, RevenueCreateSchema, RevenueEditSchema, BulkDeleteResponseSchema
from src.utils.loggers import get_logger

monthly_adapter = TypeAdapter(List[MonthlyRevenueSchema])


class ApiClientError(Exception):
    def __init__(self, message: str, status_code: int | None = None, errors: List[Dict[str, str]] | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.errors = errors


class RevenueApiClient:
    """
    Async client of the revenue API.

    The bearer token is attached to every request. A 401 response clears it,
    so the caller has to log in again.
    """

    def __init__(
        self,
        base_url: str = API_URL,
        token: str | None = None,
        timeout: float = API_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None
    ) -> None:
        self.token = token
        self.logger = get_logger(name="REVENUE-CLIENT")
        self.client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
            event_hooks={
                "request": [self.add_auth_header],
                "response": [self.check_auth]
            }
        )

    async def add_auth_header(self, request: httpx.Request) -> None:
        if self.token:
            request.headers["Authorization"] = f"Bearer {self.token}"

    async def check_auth(self, response: httpx.Response) -> None:
        request = response.request
        self.logger.info(f"[{request.method}] {request.url.path} - {response.status_code}")
        if response.status_code == 401:
            self.logger.warning("Unauthorized, the token is cleared")
            self.token = None

    async def request(self, method: str, url: str, **kwargs) -> Any:
        try:
            response = await self.client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            self.logger.error(f"[{method}] {url} - {e}")
            raise ApiClientError(str(e) or e.__class__.__name__)

        if response.is_error:
            try:
                content = response.json()
            except ValueError:
                content = {}

            message = content.get("message") if isinstance(content, dict) else None
            raise ApiClientError(
                message or f"HTTP {response.status_code}",
                status_code=response.status_code,
                errors=content.get("errors") if isinstance(content, dict) else None
            )

        try:
            return response.json()
        except ValueError:
            self.logger.error(f"[{method}] {url} - invalid JSON in a {response.status_code} response")
            raise ApiClientError('Invalid response from server', status_code=response.status_code)

    @staticmethod
    def params(**kwargs) -> Dict[str, Any]:
        return {key: value for key, value in kwargs.items() if value is not None}

    async def login(self, email: str, password: str) -> str:
        content = await self.request(
            "POST",
            "/auth/jwt/login",
            data={"username": email, "password": password},
            headers={"Content-Type": "application/x-www-form-urlencoded"}
        )
        self.token = content["access_token"]
        return self.token

    async def get_revenues(
        self,
        year: int | None = None,
        month: int | None = None,
        category: str | None = None,
        payment_status: str | None = None,
        page: int | None = None,
        limit: int | None = None
    ) -> RevenueListResponseSchema:
        params = self.params(
            year=year,
            month=month,
            category=category,
            payment_status=payment_status,
            page=page,
            limit=limit
        )
        content = await self.request("GET", "/revenue", params=params)
        return RevenueListResponseSchema.model_validate(content)

    async def get_monthly(self, year: int) -> List[MonthlyRevenueSchema]:
        content = await self.request("GET", "/revenue/monthly", params={"year": year})
        return monthly_adapter.validate_python(content)

    async def get_summary(self, year: int) -> YearlySummaryDataSchema:
        content = await self.request("GET", "/revenue/summary", params={"year": year})
        return YearlySummaryResponseSchema.model_validate(content).data

    async def get_monthly_detail(self, year: int, month: int, **filters) -> MonthlyDetailResponseSchema:
        params = self.params(year=year, month=month, **filters)
        content = await self.request("GET", "/revenue/monthly-detail", params=params)
        return MonthlyDetailResponseSchema.model_validate(content)

    async def get_stats_overview(self, year: int) -> StatsOverviewDataSchema:
        content = await self.request("GET", "/revenue/stats/overview", params={"year": year})
        return StatsOverviewResponseSchema.model_validate(content).data

    async def create_revenue(self, data: RevenueCreateSchema) -> RevenueReadSchema:
        content = await self.request("POST", "/revenue", json=data.model_dump(mode='json'))
        return RevenueResponseSchema.model_validate(content).data

    async def update_revenue(self, revenue_id: int, data: RevenueEditSchema) -> RevenueReadSchema:
        content = await self.request(
            "PUT",
            f"/revenue/{revenue_id}",
            json=data.model_dump(mode='json', exclude_unset=True)
        )
        return RevenueResponseSchema.model_validate(content).data

    async def delete_revenue(self, revenue_id: int) -> str:
        content = await self.request("DELETE", f"/revenue/{revenue_id}")
        return content.get("message", "")

    async def bulk_delete_revenues(self, revenue_ids: List[int]) -> BulkDeleteResponseSchema:
        content = await self.request("POST", "/revenue/bulk-delete", json={"ids": revenue_ids})
        return BulkDeleteResponseSchema.model_validate(content)

    async def aclose(self) -> None:
        await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
