"""
Base model shared by API-facing entities.
"""
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """
    Model with snake_case fields and camelCase aliases.

    Stored items use the field names (model_dump()); API payloads use the
    aliases (model_dump(by_alias=True)). Either form is accepted on input.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
