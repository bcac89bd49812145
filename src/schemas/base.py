from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BaseSchema(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        extra='ignore'
    )


# Aggregated views are exchanged with camelCase keys
class CamelSchema(BaseSchema):
    model_config = ConfigDict(
        from_attributes=True,
        extra='ignore',
        alias_generator=to_camel,
        populate_by_name=True
    )
