from typing import List, Annotated

from pydantic import BaseModel, Field


class SuccessSchema(BaseModel):
    success: bool = True


class SuccessMessageSchema(SuccessSchema):
    message: Annotated[str, Field(description="Pesan", examples=["Data pendapatan berhasil dihapus"])]


class ErrorItemSchema(BaseModel):
    field: Annotated[str, Field(description="Nama field", examples=["amount"])]
    message: Annotated[str, Field(description="Pesan kesalahan", examples=["Input should be a valid decimal"])]


class MessageSchema(BaseModel):
    success: bool = False
    message: Annotated[str, Field(description="Pesan kesalahan", examples=["Validation error"])]
    errors: Annotated[List[ErrorItemSchema] | None, Field(description="Daftar kesalahan per field")] = None
