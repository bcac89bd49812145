from enum import StrEnum, Enum
from typing import Any


class RevenueCategory(StrEnum):

    AERONAUTIKA = "aeronautika"
    NON_AERONAUTIKA = "non-aeronautika"


class PaymentStatus(StrEnum):

    PAID = "paid"
    PENDING = "pending"
    OVERDUE = "overdue"


class SortOrder(StrEnum):

    ASC = "ASC"
    DESC = "DESC"

    @classmethod
    def _missing_(cls, value: Any):
        value = str(value).upper()
        for member in cls:
            if member.value == value:
                return member
        return None


class RevenueSortField(StrEnum):

    DATE = "date"
    AMOUNT = "amount"
    SERVICE_TYPE = "service_type"
    CATEGORY = "category"
    PAYMENT_STATUS = "payment_status"
    INVOICE_NUMBER = "invoice_number"
    CREATED_AT = "created_at"


class StoreState(Enum):

    INITIALIZED = "initialized"
    POPULATED = "populated"
    CLEARED = "cleared"
