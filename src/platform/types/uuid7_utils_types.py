"""
UUID7 Pydantic type

uuid_utils.UUID carries no pydantic schema, so request and response models
cannot declare it directly. UtilsUUID7 adds:

- JSON mode: accepts a string and converts it to uuid_utils.UUID
- Python mode: accepts a UUID instance or a string
- Serialization: always a string
- OpenAPI: `{"type": "string", "format": "uuid"}`

Usage:
    class OrderResponse(BaseModel):
        id: UtilsUUID7
"""

from typing import Any
import uuid

from pydantic import GetCoreSchemaHandler, GetJsonSchemaHandler
from pydantic.json_schema import JsonSchemaValue
from pydantic_core import core_schema
from uuid_utils import UUID


def _to_uuid(value: Any) -> UUID:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError as e:
        raise ValueError(f'Invalid UUID: {value}') from e


class UtilsUUID7(UUID):
    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        # Must stay convertible to JSON schema, hence no plain info validators
        from_str = core_schema.chain_schema(
            [
                core_schema.str_schema(),
                core_schema.no_info_plain_validator_function(_to_uuid),
            ]
        )
        return core_schema.json_or_python_schema(
            json_schema=from_str,
            python_schema=core_schema.union_schema(
                [
                    core_schema.is_instance_schema(UUID),
                    # asyncpg hands back stdlib uuid.UUID
                    core_schema.chain_schema(
                        [
                            core_schema.is_instance_schema(uuid.UUID),
                            core_schema.no_info_plain_validator_function(_to_uuid),
                        ]
                    ),
                    from_str,
                ]
            ),
            serialization=core_schema.plain_serializer_function_ser_schema(
                str,
                when_used='always',
                return_schema=core_schema.str_schema(),
            ),
        )

    @classmethod
    def __get_pydantic_json_schema__(
        cls, schema: core_schema.CoreSchema, handler: GetJsonSchemaHandler
    ) -> JsonSchemaValue:
        return {'type': 'string', 'format': 'uuid'}
