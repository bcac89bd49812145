import datetime
import json
from decimal import Decimal

import httpx
import pytest
from httpx import ASGITransport

from src.client.api import RevenueApiClient, ApiClientError
from src.client.store import RevenueStore
from src.schemas.revenue import RevenueCreateSchema, RevenueEditSchema
from src.utils.enums import RevenueCategory, PaymentStatus, StoreState
from tests.conftest import create_partner, create_revenue


@pytest.fixture(scope="function")
async def api(app, token: str):
    async with RevenueApiClient(base_url="http://test", token=token, transport=ASGITransport(app=app)) as api:
        yield api


@pytest.fixture(scope="function")
async def partners(app) -> dict:
    garuda_id = await create_partner("PT Garuda Indonesia")
    kopi_id = await create_partner("Kedai Kopi Nusantara")

    await create_revenue(garuda_id, datetime.date(2024, 2, 1), 1000)
    await create_revenue(garuda_id, datetime.date(2024, 5, 1), 3000, service_type="parking_fee")
    await create_revenue(
        kopi_id, datetime.date(2024, 5, 2), 1000, category=RevenueCategory.NON_AERONAUTIKA,
        service_type="concession", payment_status=PaymentStatus.PENDING
    )
    return {"garuda_id": garuda_id, "kopi_id": kopi_id}


def failing_transport(failing_path: str, app_transport: ASGITransport) -> httpx.MockTransport:
    """
    Answers requests to failing_path with a server error and forwards everything else to the app.
    """
    async def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == failing_path:
            return httpx.Response(500, json={"success": False, "message": "Server error"})
        return await app_transport.handle_async_request(request)

    return httpx.MockTransport(handler)


class TestRevenueStore:

    async def test_refresh_all_data(self, api: RevenueApiClient, partners: dict):
        store = RevenueStore(api=api)
        result = await store.refresh_all_data(2024)
        msg = "Failed to refresh data"
        assert result.success and store.state == StoreState.POPULATED and not store.has_errors, msg
        assert store.current_year == 2024 and not store.is_loading, msg

        msg = "Wrong derived totals"
        assert store.total_revenue == Decimal("5000"), msg
        assert store.aeronautika_revenue == Decimal("4000"), msg
        assert store.non_aeronautika_revenue == Decimal("1000"), msg

        msg = "Server aggregates differ from the local copy"
        assert store.verify_data_consistency() == [], msg
        assert len(store.monthly_data) == 12 and store.summary.summary.total_revenue == Decimal("5000"), msg

    async def test_derived_views(self, api: RevenueApiClient, partners: dict):
        store = RevenueStore(api=api)
        await store.refresh_all_data(2024)

        msg = "Wrong top services"
        assert [(service.name, service.amount) for service in store.top_services] == [
            ("parking_fee", Decimal("3000")),
            ("concession", Decimal("1000")),
            ("landing_fee", Decimal("1000")),
        ], msg

        top_partners = store.top_partners
        msg = "Wrong top partners"
        assert [partner.name for partner in top_partners] == ["PT Garuda Indonesia", "Kedai Kopi Nusantara"], msg
        assert top_partners[0].id == partners["garuda_id"] and top_partners[0].transactions == 2, msg
        assert top_partners[0].percentage == Decimal("80.0") and top_partners[1].percentage == Decimal("20.0"), msg

        msg = "Wrong local filter"
        assert len(store.filter_revenue_data(category=RevenueCategory.AERONAUTIKA)) == 2, msg
        assert len(store.filter_revenue_data(partner_id=partners["kopi_id"])) == 1, msg
        assert len(store.filter_revenue_data(payment_status=PaymentStatus.PENDING)) == 1, msg
        assert len(store.filter_revenue_data(
            start_date=datetime.date(2024, 5, 1),
            end_date=datetime.date(2024, 5, 1)
        )) == 1, msg

        # A single bound is ignored
        assert len(store.filter_revenue_data(start_date=datetime.date(2024, 5, 1))) == 3, msg

        revenue = store.revenue_data[0]
        assert store.get_revenue_by_id(revenue.id) is revenue and store.get_revenue_by_id(12345) is None, msg

    async def test_discrepancy(self, api: RevenueApiClient, partners: dict):
        store = RevenueStore(api=api)
        await store.refresh_all_data(2024)

        # The local copy loses one row
        store.revenue_data = [item for item in store.revenue_data if item.amount != Decimal("3000")]
        discrepancies = store.verify_data_consistency()

        msg = "Discrepancies were not detected"
        pairs = {(item.metric, item.source, item.other_source) for item in discrepancies}
        assert ("total", "revenue", "monthly") in pairs and ("total", "revenue", "summary") in pairs, msg
        assert ("aeronautika", "revenue", "monthly") in pairs, msg

        msg = "Monthly series and yearly summary agree with each other"
        assert not any(item.source == "monthly" and item.other_source == "summary" for item in discrepancies), msg

        total = next(item for item in discrepancies if item.metric == "total" and item.other_source == "monthly")
        assert total.difference == Decimal("-3000"), msg

    async def test_add_revenue(self, api: RevenueApiClient, partners: dict):
        store = RevenueStore(api=api)
        await store.refresh_all_data(2024)

        result = await store.add_revenue_data(RevenueCreateSchema(
            date=datetime.date(2024, 5, 10),
            partner_id=partners["kopi_id"],
            category=RevenueCategory.NON_AERONAUTIKA,
            service_type="concession",
            amount=Decimal("500"),
            payment_status=PaymentStatus.PAID
        ))
        msg = "Failed to add revenue"
        assert result.success and store.revenue_data[0].id == result.data.id, msg

        await store.refresh_task
        msg = "Aggregates were not refreshed in the background"
        assert store.monthly_data[4].total == Decimal("4500"), msg
        assert store.summary.summary.non_aeronautika_revenue == Decimal("1500"), msg
        assert store.verify_data_consistency() == [], msg

    async def test_update_revenue(self, api: RevenueApiClient, partners: dict):
        store = RevenueStore(api=api)
        await store.refresh_all_data(2024)
        revenue = store.revenue_data[-1]

        result = await store.update_revenue_data(revenue.id, RevenueEditSchema(amount=Decimal("1200")))
        msg = "Failed to update revenue"
        assert result.success and store.get_revenue_by_id(revenue.id).amount == Decimal("1200"), msg

        await store.refresh_task
        assert store.summary.summary.total_revenue == Decimal("5200"), msg

    async def test_delete_revenue(self, api: RevenueApiClient, partners: dict):
        store = RevenueStore(api=api)
        await store.refresh_all_data(2024)
        revenue_id = store.revenue_data[0].id

        result = await store.delete_revenue_data(revenue_id)
        msg = "Failed to delete revenue"
        assert result.success and store.get_revenue_by_id(revenue_id) is None, msg

        await store.refresh_task
        assert store.verify_data_consistency() == [], msg

    async def test_bulk_delete_revenue(self, api: RevenueApiClient, partners: dict):
        store = RevenueStore(api=api)
        await store.refresh_all_data(2024)
        ids = [item.id for item in store.revenue_data[:2]]

        result = await store.bulk_delete_revenue_data(ids + [12345])
        msg = "Failed to delete revenues"
        assert result.success and result.data == 2 and len(store.revenue_data) == 1, msg

        await store.refresh_task
        assert store.verify_data_consistency() == [], msg

    # Mutation failures are reported, never raised
    async def test_mutation_failure(self, api: RevenueApiClient, partners: dict):
        store = RevenueStore(api=api)
        await store.refresh_all_data(2024)

        result = await store.add_revenue_data(RevenueCreateSchema(
            date=datetime.date(2024, 5, 10),
            partner_id=12345,
            category=RevenueCategory.AERONAUTIKA,
            service_type="landing_fee",
            amount=Decimal("500"),
            payment_status=PaymentStatus.PAID
        ))
        msg = "Unknown partner must be reported"
        assert not result.success and result.message == "Partner tidak ditemukan", msg
        assert len(store.revenue_data) == 3 and store.refresh_task is None, msg

        result = await store.delete_revenue_data(12345)
        assert not result.success and result.message == "Data pendapatan tidak ditemukan", msg

        result = await store.bulk_delete_revenue_data([])
        assert not result.success and result.message == "IDs array is required", msg

    # One failed fetch fails the refresh without touching the other slots
    async def test_partial_failure(self, app, token: str, partners: dict):
        transport = failing_transport("/revenue/monthly", ASGITransport(app=app))
        async with RevenueApiClient(base_url="http://test", token=token, transport=transport) as api:
            store = RevenueStore(api=api)
            result = await store.refresh_all_data(2024)

        msg = "Refresh must fail when one of the fetches fails"
        assert not result.success and store.has_errors, msg
        assert store.errors["monthly"] == "Server error" and store.monthly_data == [], msg

        msg = "Other slots must keep their data"
        assert store.errors["revenue"] is None and len(store.revenue_data) == 3, msg
        assert store.errors["summary"] is None and store.summary is not None, msg

    async def test_monthly_detail(self, api: RevenueApiClient, partners: dict):
        store = RevenueStore(api=api)
        result = await store.fetch_monthly_detail(2024, 5, sort="amount", order="ASC")
        msg = "Failed to fetch the monthly detail"
        assert result.success and store.monthly_detail.period.month_name == "Mei", msg
        assert [item.amount for item in store.monthly_detail.transactions] == [Decimal("1000"), Decimal("3000")], msg

        # A failed fetch keeps the previous detail
        result = await store.fetch_monthly_detail(2024, 13)
        msg = "Previous detail must survive a failed fetch"
        assert not result.success and store.errors["detail"], msg
        assert store.monthly_detail is not None, msg

        store.clear_monthly_detail()
        assert store.monthly_detail is None and store.errors["detail"] is None, msg

    async def test_unauthorized_clears_token(self, app):
        async with RevenueApiClient(base_url="http://test", token="expired", transport=ASGITransport(app=app)) as api:
            with pytest.raises(ApiClientError) as exc_info:
                await api.get_revenues()

            msg = "Token must be cleared after 401"
            assert exc_info.value.status_code == 401 and api.token is None, msg

    async def test_clear_and_export(self, api: RevenueApiClient, partners: dict):
        store = RevenueStore(api=api)
        await store.refresh_all_data(2024)

        exported = json.loads(store.export_data())
        msg = "Wrong export"
        assert exported["metadata"]["year"] == 2024 and exported["metadata"]["total_records"] == 3, msg
        assert len(exported["monthly"]) == 12 and "nonAeronautika" in exported["monthly"][0], msg
        assert exported["summary"]["summary"]["totalRevenue"] == 5000, msg

        store.clear_all_data()
        msg = "Store was not cleared"
        assert store.state == StoreState.CLEARED and store.revenue_data == [] and store.summary is None, msg
        assert store.monthly_data == [] and store.last_updated is None and not store.has_errors, msg

    # Every background refresh is tracked until it finishes
    async def test_back_to_back_mutations(self, api: RevenueApiClient, partners: dict):
        store = RevenueStore(api=api)
        await store.refresh_all_data(2024)
        first_id, second_id = (item.id for item in store.revenue_data[:2])

        first = await store.update_revenue_data(first_id, RevenueEditSchema(amount=Decimal("100")))
        first_task = store.refresh_task
        second = await store.update_revenue_data(second_id, RevenueEditSchema(amount=Decimal("200")))
        msg = "Failed to update revenues"
        assert first.success and second.success, msg

        msg = "Each mutation must schedule its own refresh"
        assert first_task is not None and store.refresh_task is not first_task, msg

        await store.wait_for_refresh()
        msg = "Pending refreshes were not awaited"
        assert first_task.done() and store.refresh_tasks == set(), msg
        assert store.verify_data_consistency() == [], msg
        assert store.summary.summary.total_revenue == store.total_revenue, msg

    # A success status with a body that is not JSON is reported, not raised
    async def test_invalid_json_response(self, app, token: str, partners: dict):
        app_transport = ASGITransport(app=app)

        async def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/revenue/summary":
                return httpx.Response(200, text="<html>maintenance</html>")
            return await app_transport.handle_async_request(request)

        async with RevenueApiClient(base_url="http://test", token=token, transport=httpx.MockTransport(handler)) as api:
            with pytest.raises(ApiClientError) as exc_info:
                await api.get_summary(2024)

            msg = "Non-JSON body must raise the client error"
            assert exc_info.value.status_code == 200, msg

            store = RevenueStore(api=api)
            result = await store.refresh_all_data(2024)

        msg = "Non-JSON summary must fail the refresh"
        assert not result.success and store.errors["summary"] == "Invalid response from server", msg
        assert store.summary is None and store.errors["monthly"] is None, msg
