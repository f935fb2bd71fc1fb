from typing import List, Optional
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


# Base for all API schemas: snake_case in Python, camelCase on the wire
class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# Pagination block attached to every list response
class Pagination(CamelModel):
    total: int
    limit: int
    offset: int
    has_more: bool

    @classmethod
    def build(cls, total: int, limit: int, offset: int, returned: int) -> "Pagination":
        return cls(total=total, limit=limit, offset=offset, has_more=offset + returned < total)


# Generic response for operations that only report success
class MessageResponse(CamelModel):
    success: bool = True
    message: str


# Error envelope returned by the exception handlers
class FieldError(CamelModel):
    field: str
    message: str


class ErrorResponse(CamelModel):
    success: bool = False
    message: str
    code: str
    errors: Optional[List[FieldError]] = None
    error: Optional[str] = None
