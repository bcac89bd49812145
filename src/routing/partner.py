from fastapi import APIRouter, Depends

from src.depends import get_service_partner
from src.schemas.common import MessageSchema
from src.schemas.partner import PartnerListResponseSchema, PartnerResponseSchema, PartnerCreateSchema
from src.services.partner import PartnerService
from src.utils.descriptions.partner import partner_tag_description, get_partners_description, \
    get_partner_description, create_partner_description, recalculate_partner_description

router = APIRouter()
partner_tag_metadata = {
    "name": "partner",
    "description": partner_tag_description,
}

error_responses = {
    400: {'model': MessageSchema, "description": "Bad request"},
    401: {'model': MessageSchema, "description": "Unauthorized"},
    404: {'model': MessageSchema, "description": "Not found"},
}


@router.get(
    path="/partner",
    tags=["partner"],
    responses = error_responses,
    response_model = PartnerListResponseSchema,
    summary = 'Daftar mitra',
    description = get_partners_description
)
async def get_partners(
    service: PartnerService = Depends(get_service_partner)
):
    partners = await service.get_partners()
    return PartnerListResponseSchema(data=partners)


@router.post(
    path="/partner",
    tags=["partner"],
    status_code=201,
    responses = error_responses,
    response_model = PartnerResponseSchema,
    summary = 'Tambah mitra',
    description = create_partner_description
)
async def create(
    data: PartnerCreateSchema,
    service: PartnerService = Depends(get_service_partner)
):
    partner = await service.create(data)
    return PartnerResponseSchema(data=partner)


@router.get(
    path="/partner/{id}",
    tags=["partner"],
    responses = error_responses,
    response_model = PartnerResponseSchema,
    summary = 'Data mitra',
    description = get_partner_description
)
async def get_partner(
    id: int,
    service: PartnerService = Depends(get_service_partner)
):
    partner = await service.get_partner(id)
    return PartnerResponseSchema(data=partner)


@router.post(
    path="/partner/{id}/recalculate",
    tags=["partner"],
    responses = error_responses,
    response_model = PartnerResponseSchema,
    summary = 'Hitung ulang total mitra',
    description = recalculate_partner_description
)
async def recalculate(
    id: int,
    service: PartnerService = Depends(get_service_partner)
):
    partner = await service.recalculate(id)
    return PartnerResponseSchema(data=partner)
