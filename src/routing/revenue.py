from typing import List

from fastapi import APIRouter, Depends, Query

from src.config import DEFAULT_PAGE_LIMIT
from src.depends import get_service_revenue
from src.schemas.common import MessageSchema, SuccessMessageSchema
from src.schemas.revenue import RevenueListResponseSchema, MonthlyDetailResponseSchema, MonthlyRevenueSchema, \
    YearlySummaryResponseSchema, StatsOverviewResponseSchema, RevenueResponseSchema, RevenueCreateSchema, \
    RevenueEditSchema, BulkDeleteSchema, BulkDeleteResponseSchema
from src.services.revenue import RevenueService
from src.utils.descriptions.revenue import revenue_tag_description, get_revenues_description, \
    get_monthly_detail_description, get_monthly_summary_description, get_yearly_summary_description, \
    get_stats_overview_description, get_revenue_description, create_revenue_description, edit_revenue_description, \
    delete_revenue_description, bulk_delete_revenues_description
from src.utils.enums import RevenueCategory, PaymentStatus

router = APIRouter()
revenue_tag_metadata = {
    "name": "revenue",
    "description": revenue_tag_description,
}

error_responses = {
    400: {'model': MessageSchema, "description": "Bad request"},
    401: {'model': MessageSchema, "description": "Unauthorized"},
}

not_found_responses = {
    **error_responses,
    404: {'model': MessageSchema, "description": "Not found"},
}


@router.get(
    path="/revenue",
    tags=["revenue"],
    responses = error_responses,
    response_model = RevenueListResponseSchema,
    summary = 'Daftar pendapatan',
    description = get_revenues_description
)
async def get_revenues(
    year: int | None = Query(None, ge=1, le=9999),
    month: int | None = Query(None, ge=1, le=12),
    category: RevenueCategory | None = None,
    payment_status: PaymentStatus | None = None,
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_LIMIT, ge=1),
    service: RevenueService = Depends(get_service_revenue)
):
    revenues = await service.get_revenues(
        year=year,
        month=month,
        category=category,
        payment_status=payment_status,
        page=page,
        limit=limit
    )
    return revenues


@router.get(
    path="/revenue/monthly-detail",
    tags=["revenue"],
    responses = error_responses,
    response_model = MonthlyDetailResponseSchema,
    summary = 'Rincian pendapatan bulanan',
    description = get_monthly_detail_description
)
async def get_monthly_detail(
    year: int | None = Query(None, ge=1, le=9999),
    month: int | None = None,
    partner: str | None = None,
    service_type: str | None = None,
    category: RevenueCategory | None = None,
    sort: str | None = None,
    order: str | None = None,
    service: RevenueService = Depends(get_service_revenue)
):
    detail = await service.get_monthly_detail(
        year=year,
        month=month,
        partner_name=partner,
        service_type=service_type,
        category=category,
        sort=sort,
        order=order
    )
    return detail


@router.get(
    path="/revenue/monthly",
    tags=["revenue"],
    responses = error_responses,
    response_model = List[MonthlyRevenueSchema],
    summary = 'Ringkasan pendapatan per bulan',
    description = get_monthly_summary_description
)
async def get_monthly_summary(
    year: int | None = Query(None, ge=1, le=9999),
    service: RevenueService = Depends(get_service_revenue)
):
    monthly_summary = await service.get_monthly_summary(year)
    return monthly_summary


@router.get(
    path="/revenue/summary",
    tags=["revenue"],
    responses = error_responses,
    response_model = YearlySummaryResponseSchema,
    summary = 'Ringkasan tahunan',
    description = get_yearly_summary_description
)
async def get_yearly_summary(
    year: int | None = Query(None, ge=1, le=9999),
    service: RevenueService = Depends(get_service_revenue)
):
    yearly_summary = await service.get_yearly_summary(year)
    return YearlySummaryResponseSchema(data=yearly_summary)


@router.get(
    path="/revenue/stats/overview",
    tags=["revenue"],
    responses = error_responses,
    response_model = StatsOverviewResponseSchema,
    summary = 'Statistik tahunan',
    description = get_stats_overview_description
)
async def get_stats_overview(
    year: int | None = Query(None, ge=1, le=9999),
    service: RevenueService = Depends(get_service_revenue)
):
    stats = await service.get_stats_overview(year)
    return StatsOverviewResponseSchema(data=stats)


@router.post(
    path="/revenue/bulk-delete",
    tags=["revenue"],
    responses = not_found_responses,
    response_model = BulkDeleteResponseSchema,
    summary = 'Hapus beberapa data pendapatan',
    description = bulk_delete_revenues_description
)
async def bulk_delete(
    data: BulkDeleteSchema | None = None,
    service: RevenueService = Depends(get_service_revenue)
):
    deleted = await service.bulk_delete(data.ids if data else None)
    return BulkDeleteResponseSchema(message=f'{deleted} data pendapatan berhasil dihapus', deleted=deleted)


@router.get(
    path="/revenue/{id}",
    tags=["revenue"],
    responses = not_found_responses,
    response_model = RevenueResponseSchema,
    summary = 'Data pendapatan',
    description = get_revenue_description
)
async def get_revenue(
    id: int,
    service: RevenueService = Depends(get_service_revenue)
):
    revenue = await service.get_revenue(id)
    return RevenueResponseSchema(data=revenue)


@router.post(
    path="/revenue",
    tags=["revenue"],
    status_code=201,
    responses = error_responses,
    response_model = RevenueResponseSchema,
    summary = 'Tambah data pendapatan',
    description = create_revenue_description
)
async def create(
    data: RevenueCreateSchema,
    service: RevenueService = Depends(get_service_revenue)
):
    revenue = await service.create(data)
    return RevenueResponseSchema(data=revenue)


@router.put(
    path="/revenue/{id}",
    tags=["revenue"],
    responses = not_found_responses,
    response_model = RevenueResponseSchema,
    summary = 'Ubah data pendapatan',
    description = edit_revenue_description
)
async def edit(
    id: int,
    data: RevenueEditSchema,
    service: RevenueService = Depends(get_service_revenue)
):
    revenue = await service.edit(id, data)
    return RevenueResponseSchema(data=revenue)


@router.delete(
    path="/revenue/{id}",
    tags=["revenue"],
    responses = not_found_responses,
    response_model = SuccessMessageSchema,
    summary = 'Hapus data pendapatan',
    description = delete_revenue_description
)
async def delete(
    id: int,
    service: RevenueService = Depends(get_service_revenue)
):
    await service.delete(id)
    return SuccessMessageSchema(message='Data pendapatan berhasil dihapus')
