import datetime
from decimal import Decimal
from typing import AsyncGenerator

import pytest
from httpx import AsyncClient, ASGITransport

from src.auth.manager import create_user
from src.database.db import sessionmanager
from src.database.models import PartnerOrm, RevenueOrm
from src.main import init_app
from src.schemas.user import UserCreateSchema
from src.utils.enums import RevenueCategory, PaymentStatus

USER_EMAIL = "admin@bandara.co.id"
USER_PASSWORD = "Rahasia123!"


@pytest.fixture(scope='function')
async def app(tmp_path):
    test_uri = f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"
    app = init_app(test_uri, tests = True)
    await sessionmanager.create_all()
    yield app
    await sessionmanager.close()


@pytest.fixture(scope="function")
async def aclient(app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as aclient:
        yield aclient


@pytest.fixture(scope="function")
async def token(aclient: AsyncClient) -> str:
    await create_user(UserCreateSchema(email=USER_EMAIL, password=USER_PASSWORD, name="Admin"))
    response = await aclient.post(
        url="/auth/jwt/login",
        data={
            "username": USER_EMAIL,
            "password": USER_PASSWORD
        },
    )
    return response.json()["access_token"]


def headers(token: str):
    return {
        "Accept": "application/json",
        "Authorization": f"Bearer {token}"
    }


"""
Test data
"""


async def create_partner(name: str, total_transactions: int = 0, total_amount: Decimal | int = 0) -> int:
    async with sessionmanager.session() as session:
        partner = PartnerOrm(name=name)
        session.add(partner)
        await session.flush()
        partner.total_transactions = total_transactions
        partner.total_amount = Decimal(total_amount)
        await session.commit()
        return partner.id


async def create_revenue(
    partner_id: int,
    date: datetime.date,
    amount: Decimal | int,
    category: RevenueCategory = RevenueCategory.AERONAUTIKA,
    service_type: str = "landing_fee",
    payment_status: PaymentStatus = PaymentStatus.PAID,
    invoice_number: str | None = None
) -> int:
    async with sessionmanager.session() as session:
        revenue = RevenueOrm(
            date=date,
            partner_id=partner_id,
            category=category,
            service_type=service_type,
            amount=Decimal(amount),
            payment_status=payment_status,
            invoice_number=invoice_number
        )
        session.add(revenue)
        await session.commit()
        return revenue.id


async def get_partner_totals(partner_id: int) -> tuple:
    async with sessionmanager.session() as session:
        partner = await session.get(PartnerOrm, partner_id)
        return partner.total_transactions, partner.total_amount
