from decimal import Decimal
from typing import Annotated

from pydantic import PlainSerializer, BeforeValidator, StringConstraints


def decimal_to_float(value: Decimal) -> float:
    return float(value)


def empty_str_to_none(value: str | None) -> str | None:
    if isinstance(value, str) and not value.strip():
        return None
    return value


# Money is Decimal everywhere in Python and a JSON number on the wire
Money = Annotated[Decimal, PlainSerializer(decimal_to_float, return_type=float, when_used='json')]

EmptyStrToNone = Annotated[str | None, BeforeValidator(empty_str_to_none)]

# Length limit applies to the string only, None passes through
OptionalShortStr = Annotated[
    Annotated[str, StringConstraints(max_length=100)] | None,
    BeforeValidator(empty_str_to_none)
]
