import datetime

from httpx import AsyncClient

from tests.conftest import headers, create_partner, create_revenue


class TestPartner:

    async def test_create_partner(self, aclient: AsyncClient, token: str):
        response = await aclient.post(url="/partner", json={"name": "  PT Garuda Indonesia "}, headers=headers(token))
        body = response.json()
        msg = "Failed to create partner"
        assert response.status_code == 201 and body["data"]["name"] == "PT Garuda Indonesia", msg

        msg = "New partner must start with zero totals"
        assert body["data"]["total_transactions"] == 0 and body["data"]["total_amount"] == 0, msg

    async def test_create_partner_without_name(self, aclient: AsyncClient, token: str):
        response = await aclient.post(url="/partner", json={"name": "  "}, headers=headers(token))
        msg = "Partner without a name must be rejected"
        assert response.status_code == 400, msg

    async def test_get_partners(self, aclient: AsyncClient, token: str):
        await create_partner("PT Lion Air")
        await create_partner("Kedai Kopi Nusantara")

        response = await aclient.get(url="/partner", headers=headers(token))
        body = response.json()
        msg = "Partners must be ordered by name"
        assert [partner["name"] for partner in body["data"]] == ["Kedai Kopi Nusantara", "PT Lion Air"], msg

    async def test_get_partner(self, aclient: AsyncClient, token: str):
        partner_id = await create_partner("PT Lion Air")

        response = await aclient.get(url=f"/partner/{partner_id}", headers=headers(token))
        msg = "Failed to get partner"
        assert response.status_code == 200 and response.json()["data"]["id"] == partner_id, msg

        response = await aclient.get(url="/partner/12345", headers=headers(token))
        msg = "Missing partner must return 404"
        assert response.status_code == 404 and response.json()["message"] == "Partner tidak ditemukan", msg

    # Recalculation brings the running totals in line with the ledger
    async def test_recalculate(self, aclient: AsyncClient, token: str):
        partner_id = await create_partner("PT Garuda Indonesia", total_transactions=7, total_amount=99)
        await create_revenue(partner_id, datetime.date(2024, 3, 1), 1000)
        await create_revenue(partner_id, datetime.date(2024, 4, 1), 2500)

        response = await aclient.post(url=f"/partner/{partner_id}/recalculate", headers=headers(token))
        body = response.json()
        msg = "Failed to recalculate partner totals"
        assert response.status_code == 200, msg
        assert body["data"]["total_transactions"] == 2 and body["data"]["total_amount"] == 3500, msg

    async def test_recalculate_after_create(self, aclient: AsyncClient, token: str):
        partner_id = await create_partner("PT Garuda Indonesia")
        response = await aclient.post(
            url="/revenue",
            json={
                "date": "2024-03-15",
                "partner_id": partner_id,
                "category": "aeronautika",
                "service_type": "landing_fee",
                "amount": 5000,
                "payment_status": "paid",
            },
            headers=headers(token)
        )
        assert response.status_code == 201

        response = await aclient.get(url=f"/partner/{partner_id}", headers=headers(token))
        msg = "Create must not change partner totals"
        assert response.json()["data"]["total_transactions"] == 0, msg

        response = await aclient.post(url=f"/partner/{partner_id}/recalculate", headers=headers(token))
        msg = "Recalculation did not pick up the new revenue"
        assert response.json()["data"]["total_amount"] == 5000, msg
