from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")

# Responses read ORM attributes by field name and are written in camelCase;
# FastAPI re-validates the camelCase dump, so aliases must work both ways.
CAMEL_OUTPUT = ConfigDict(
    from_attributes=True,
    alias_generator=to_camel,
    populate_by_name=True,
)


class ApiResponse(BaseModel, Generic[T]):
    success: bool = True
    message: str
    data: T


class ErrorDetail(BaseModel):
    field: str
    message: str


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    errors: Optional[List[ErrorDetail]] = None
