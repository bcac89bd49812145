from typing import List

from sqlalchemy import select as sa_select, func

from src.database.models.partner import PartnerOrm
from src.database.models.revenue import RevenueOrm
from src.repositories.base import BaseRepository
from src.utils.common import to_decimal


class PartnerRepository(BaseRepository):

    async def get_partners(self) -> List[PartnerOrm]:
        stmt = sa_select(PartnerOrm).order_by(PartnerOrm.name, PartnerOrm.id)
        partners = await self.select_all(stmt)
        return partners

    async def get_partner(self, partner_id: int) -> PartnerOrm | None:
        stmt = sa_select(PartnerOrm).where(PartnerOrm.id == partner_id)
        partner = await self.select_first(stmt)
        return partner

    async def create_partner(self, name: str) -> PartnerOrm:
        partner = PartnerOrm(name=name)
        await self.save_object(partner)
        return partner

    async def recalculate_totals(self, partner: PartnerOrm) -> PartnerOrm:
        stmt = (
            sa_select(
                func.count(RevenueOrm.id),
                func.coalesce(func.sum(RevenueOrm.amount), 0)
            )
            .where(RevenueOrm.partner_id == partner.id)
        )
        total_transactions, total_amount = await self.select_first(stmt, scalars=False)
        await self.update_object(partner, {
            "total_transactions": total_transactions,
            "total_amount": to_decimal(total_amount)
        })
        return partner
