from fastapi import Depends

from sqlalchemy.ext.asyncio import AsyncSession

from src.auth.auth import get_current_active_user
from src.database.db import get_session
from src.database.models.user import UserOrm
from src.repositories.partner import PartnerRepository
from src.repositories.revenue import RevenueRepository
from src.services.partner import PartnerService
from src.services.revenue import RevenueService

"""
Dependency injection
"""


def get_service_revenue(
    session: AsyncSession = Depends(get_session),
    user: UserOrm = Depends(get_current_active_user)
) -> RevenueService:
    repository = RevenueRepository(session, user)
    service = RevenueService(repository)
    return service


def get_service_partner(
    session: AsyncSession = Depends(get_session),
    user: UserOrm = Depends(get_current_active_user)
) -> PartnerService:
    repository = PartnerRepository(session, user)
    service = PartnerService(repository)
    return service
