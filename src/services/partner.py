from typing import List

from src.repositories.partner import PartnerRepository
from src.schemas.partner import PartnerReadSchema, PartnerCreateSchema
from src.utils.exceptions import NotFoundException


class PartnerService:

    def __init__(self, repository: PartnerRepository) -> None:
        self.repository = repository
        self.logger = repository.logger

    async def get_partners(self) -> List[PartnerReadSchema]:
        partners = await self.repository.get_partners()
        return [PartnerReadSchema.model_validate(partner) for partner in partners]

    async def get_partner(self, partner_id: int) -> PartnerReadSchema:
        partner = await self.repository.get_partner(partner_id)
        if not partner:
            raise NotFoundException('Partner tidak ditemukan')

        return PartnerReadSchema.model_validate(partner)

    async def create(self, create_schema: PartnerCreateSchema) -> PartnerReadSchema:
        partner = await self.repository.create_partner(name=create_schema.name)
        self.logger.info(f"Partner {partner.id} ({partner.name}) created")
        return PartnerReadSchema.model_validate(partner)

    async def recalculate(self, partner_id: int) -> PartnerReadSchema:
        """
        Brings the running totals of the partner back in line with the revenue ledger.
        """
        partner = await self.repository.get_partner(partner_id)
        if not partner:
            raise NotFoundException('Partner tidak ditemukan')

        await self.repository.recalculate_totals(partner)
        self.logger.info(
            f"Partner {partner.id} totals recalculated: "
            f"{partner.total_transactions} transactions, {partner.total_amount}"
        )
        return PartnerReadSchema.model_validate(partner)
