import datetime

import pytest
from httpx import AsyncClient

from src.utils.enums import RevenueCategory, PaymentStatus
from tests.conftest import headers, create_partner, create_revenue


@pytest.fixture(scope="function")
async def ledger(app) -> dict:
    garuda_id = await create_partner("PT Garuda Indonesia")
    lion_id = await create_partner("PT Lion Air")
    kopi_id = await create_partner("Kedai Kopi Nusantara")

    # 2024
    await create_revenue(garuda_id, datetime.date(2024, 1, 10), 1000, invoice_number="INV-001")
    await create_revenue(garuda_id, datetime.date(2024, 3, 5), 2000, service_type="parking_fee")
    await create_revenue(
        lion_id, datetime.date(2024, 3, 20), 1500, payment_status=PaymentStatus.PENDING, invoice_number="INV-002"
    )
    await create_revenue(
        kopi_id, datetime.date(2024, 3, 31), 700, category=RevenueCategory.NON_AERONAUTIKA,
        service_type="concession", payment_status=PaymentStatus.OVERDUE
    )
    await create_revenue(
        kopi_id, datetime.date(2024, 12, 31), 300, category=RevenueCategory.NON_AERONAUTIKA,
        service_type="concession"
    )

    # 2023
    await create_revenue(garuda_id, datetime.date(2023, 6, 1), 2000)
    await create_revenue(lion_id, datetime.date(2023, 7, 1), 2000)

    return {"garuda_id": garuda_id, "lion_id": lion_id, "kopi_id": kopi_id}


class TestMonthlySummary:

    async def test_empty_year(self, aclient: AsyncClient, token: str):
        response = await aclient.get(url="/revenue/monthly", params={"year": 2030}, headers=headers(token))
        body = response.json()
        msg = "Empty year must have 12 zero months"
        assert response.status_code == 200 and len(body) == 12, msg
        assert [month["month"] for month in body][:3] == ["Jan", "Feb", "Mar"] and body[11]["month"] == "Dec", msg
        assert all(month["total"] == 0 and month["transactions"] == 0 for month in body), msg

    async def test_monthly_summary(self, aclient: AsyncClient, token: str, ledger: dict):
        response = await aclient.get(url="/revenue/monthly", params={"year": 2024}, headers=headers(token))
        body = response.json()
        march = body[2]
        msg = "Wrong March totals"
        assert march == {
            "month": "Mar",
            "aeronautika": 3500,
            "nonAeronautika": 700,
            "total": 4200,
            "transactions": 3
        }, msg

        msg = "December must contain the revenue of the last day of the year"
        assert body[11]["total"] == 300, msg

    # The 12 months add up to the yearly total
    async def test_months_sum_to_year(self, aclient: AsyncClient, token: str, ledger: dict):
        response = await aclient.get(url="/revenue/monthly", params={"year": 2024}, headers=headers(token))
        monthly_total = sum(month["total"] for month in response.json())

        response = await aclient.get(url="/revenue/summary", params={"year": 2024}, headers=headers(token))
        yearly_total = response.json()["data"]["summary"]["totalRevenue"]

        msg = "Sum of months differs from the yearly total"
        assert abs(monthly_total - yearly_total) <= 0.01 and yearly_total == 5500, msg


class TestYearlySummary:

    async def test_yearly_summary(self, aclient: AsyncClient, token: str, ledger: dict):
        response = await aclient.get(url="/revenue/summary", params={"year": 2024}, headers=headers(token))
        body = response.json()
        msg = "Failed to get the yearly summary"
        assert response.status_code == 200 and body["success"] is True, msg

        summary = body["data"]["summary"]
        msg = "Wrong yearly summary"
        assert summary == {
            "totalRevenue": 5500,
            "totalTransactions": 5,
            "aeronautikaRevenue": 4500,
            "nonAeronautikaRevenue": 1000,
            "paidAmount": 3300,
            "pendingAmount": 1500,
            "overdueAmount": 700
        }, msg

        top_services = body["data"]["topServices"]
        msg = "Wrong top services"
        assert [service["name"] for service in top_services] == ["landing_fee", "parking_fee", "concession"], msg
        assert top_services[0] == {"name": "landing_fee", "amount": 2500, "count": 2}, msg

        top_partners = body["data"]["topPartners"]
        msg = "Wrong top partners"
        assert [partner["name"] for partner in top_partners] == [
            "PT Garuda Indonesia", "PT Lion Air", "Kedai Kopi Nusantara"
        ], msg
        assert top_partners[0]["id"] == ledger["garuda_id"] and top_partners[0]["count"] == 2, msg

    # Equal amounts are ordered by name
    async def test_top_partner_ties(self, aclient: AsyncClient, token: str, ledger: dict):
        response = await aclient.get(url="/revenue/summary", params={"year": 2023}, headers=headers(token))
        top_partners = response.json()["data"]["topPartners"]
        msg = "Partners with equal amounts must be ordered by name"
        assert [partner["name"] for partner in top_partners] == ["PT Garuda Indonesia", "PT Lion Air"], msg


class TestStatsOverview:

    async def test_stats_overview(self, aclient: AsyncClient, token: str, ledger: dict):
        response = await aclient.get(url="/revenue/stats/overview", params={"year": 2024}, headers=headers(token))
        body = response.json()
        msg = "Failed to get statistics"
        assert response.status_code == 200, msg

        overview = body["data"]["overview"]
        msg = "Wrong overview"
        assert overview["totalRevenue"] == 5500 and overview["totalTransactions"] == 5, msg
        assert overview["averageAmount"] == 1100 and overview["maxAmount"] == 2000, msg
        assert overview["minAmount"] == 300, msg

        # 5500 against 4000, 5 transactions against 2
        msg = "Wrong growth"
        assert overview["revenueGrowth"] == 37.5 and overview["transactionGrowth"] == 150, msg

        monthly_growth = body["data"]["monthlyGrowth"]
        msg = "Monthly growth must contain all 12 months"
        assert [month["month"] for month in monthly_growth] == list(range(1, 13)), msg
        assert monthly_growth[1]["total"] == 0 and monthly_growth[2]["total"] == 4200, msg

        categories = {item["category"]: item for item in body["data"]["categoryBreakdown"]}
        msg = "Wrong category breakdown"
        assert categories["aeronautika"] == {"category": "aeronautika", "total": 4500, "count": 3, "average": 1500}, msg
        assert categories["non-aeronautika"]["average"] == 500, msg

        statuses = {item["status"]: item for item in body["data"]["paymentStatusBreakdown"]}
        msg = "Wrong payment status breakdown"
        assert statuses["paid"] == {"status": "paid", "total": 3300, "count": 3}, msg
        assert statuses["pending"]["total"] == 1500 and statuses["overdue"]["count"] == 1, msg

    # Nothing to compare with
    async def test_growth_without_previous_year(self, aclient: AsyncClient, token: str, ledger: dict):
        response = await aclient.get(url="/revenue/stats/overview", params={"year": 2023}, headers=headers(token))
        overview = response.json()["data"]["overview"]
        msg = "Growth must be zero when the previous year is empty"
        assert overview["revenueGrowth"] == 0 and overview["transactionGrowth"] == 0, msg

    # The first year has no previous year, the rest of the ledger is not used instead
    async def test_first_year(self, aclient: AsyncClient, token: str, ledger: dict):
        response = await aclient.get(url="/revenue/stats/overview", params={"year": 1}, headers=headers(token))
        body = response.json()
        msg = "Failed to get statistics for the first year"
        assert response.status_code == 200, msg

        overview = body["data"]["overview"]
        msg = "First year must not include other years"
        assert overview["totalRevenue"] == 0 and overview["totalTransactions"] == 0, msg
        assert overview["revenueGrowth"] == 0 and overview["transactionGrowth"] == 0, msg


class TestMonthlyDetail:

    async def test_year_and_month_required(self, aclient: AsyncClient, token: str):
        response = await aclient.get(url="/revenue/monthly-detail", params={"year": 2024}, headers=headers(token))
        body = response.json()
        msg = "Monthly detail without month must be rejected"
        assert response.status_code == 400 and body["message"] == "Year and month are required", msg

    async def test_monthly_detail(self, aclient: AsyncClient, token: str, ledger: dict):
        response = await aclient.get(
            url="/revenue/monthly-detail",
            params={"year": 2024, "month": 3},
            headers=headers(token)
        )
        body = response.json()
        msg = "Failed to get the monthly detail"
        assert response.status_code == 200 and body["success"] is True, msg

        msg = "Wrong period"
        assert body["period"] == {"year": 2024, "month": 3, "monthName": "Maret"}, msg

        msg = "Wrong summary"
        assert body["summary"] == {
            "totalAmount": 4200,
            "totalTransactions": 3,
            "aeronautikaAmount": 3500,
            "nonAeronautikaAmount": 700,
            "aeronautikaCount": 2,
            "nonAeronautikaCount": 1
        }, msg

        transactions = body["transactions"]
        msg = "Transactions must be ordered by date, newest first"
        assert [item["date"] for item in transactions] == ["2024-03-31", "2024-03-20", "2024-03-05"], msg
        assert transactions[0]["partner"] == "Kedai Kopi Nusantara", msg

        by_partner = body["breakdown"]["byPartner"]
        msg = "Wrong partner breakdown"
        assert by_partner == [
            {"partner": "PT Garuda Indonesia", "amount": 2000, "count": 1},
            {"partner": "PT Lion Air", "amount": 1500, "count": 1},
            {"partner": "Kedai Kopi Nusantara", "amount": 700, "count": 1},
        ], msg

        by_service = body["breakdown"]["byService"]
        msg = "Wrong service breakdown"
        assert by_service[0] == {"serviceType": "parking_fee", "category": "aeronautika", "amount": 2000, "count": 1}, msg
        assert [item["serviceType"] for item in by_service] == ["parking_fee", "landing_fee", "concession"], msg

    # The partner filter is a case-insensitive substring that restricts rows
    async def test_partner_filter(self, aclient: AsyncClient, token: str, ledger: dict):
        response = await aclient.get(
            url="/revenue/monthly-detail",
            params={"year": 2024, "month": 3, "partner": "garuda"},
            headers=headers(token)
        )
        body = response.json()
        msg = "Partner filter did not restrict rows"
        assert [item["partner"] for item in body["transactions"]] == ["PT Garuda Indonesia"], msg
        assert body["summary"]["totalAmount"] == 2000 and body["summary"]["totalTransactions"] == 1, msg

    async def test_sort(self, aclient: AsyncClient, token: str, ledger: dict):
        response = await aclient.get(
            url="/revenue/monthly-detail",
            params={"year": 2024, "month": 3, "sort": "amount", "order": "asc"},
            headers=headers(token)
        )
        body = response.json()
        msg = "Transactions must be ordered by amount ascending"
        assert [item["amount"] for item in body["transactions"]] == [700, 1500, 2000], msg

    async def test_invalid_sort(self, aclient: AsyncClient, token: str):
        for params in ({"sort": "partner_id; drop table revenue"}, {"order": "sideways"}):
            response = await aclient.get(
                url="/revenue/monthly-detail",
                params={"year": 2024, "month": 3, **params},
                headers=headers(token)
            )
            msg = "Invalid sort parameters must be rejected"
            assert response.status_code == 400, msg
