from datetime import datetime
from typing import Annotated, List

from pydantic import Field, StringConstraints

from src.schemas.base import BaseSchema
from src.schemas.common import SuccessSchema
from src.schemas.validators import Money

id_ = Annotated[int, Field(description="ID mitra", examples=[1])]

name_ = Annotated[str, Field(description="Nama mitra", examples=["PT Garuda Indonesia"])]

total_transactions_ = Annotated[int, Field(description="Jumlah transaksi", examples=[12])]

total_amount_ = Annotated[Money, Field(description="Total nilai transaksi, Rp", examples=[125000000.0])]


class PartnerMinimumSchema(BaseSchema):
    id: id_
    name: name_


class PartnerReadSchema(BaseSchema):
    id: id_
    name: name_
    total_transactions: total_transactions_
    total_amount: total_amount_
    created_at: Annotated[datetime | None, Field(description="Waktu pembuatan")] = None
    updated_at: Annotated[datetime | None, Field(description="Waktu perubahan")] = None


class PartnerCreateSchema(BaseSchema):
    name: Annotated[
        str,
        StringConstraints(strip_whitespace=True, min_length=1, max_length=255),
        Field(description="Nama mitra", examples=["PT Garuda Indonesia"])
    ]


class PartnerResponseSchema(SuccessSchema):
    data: PartnerReadSchema


class PartnerListResponseSchema(SuccessSchema):
    data: List[PartnerReadSchema]
