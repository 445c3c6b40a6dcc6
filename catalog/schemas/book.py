from datetime import datetime
from typing import Annotated, Optional
from pydantic import AfterValidator, BaseModel, Field, HttpUrl, TypeAdapter, ValidationError

from catalog.db.models import Genre
from catalog.schemas.common import CAMEL_OUTPUT

_url_adapter = TypeAdapter(HttpUrl)


def _check_url(value: str) -> str:
    # HttpUrl normalises (adds a trailing slash), so keep the caller's string
    try:
        _url_adapter.validate_python(value)
    except ValidationError:
        raise ValueError("Invalid URL format") from None
    return value


ImageUrl = Annotated[str, AfterValidator(_check_url)]


class BookCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    author: str = Field(..., min_length=1, max_length=255)
    genre: Genre
    isbn: str = Field(..., min_length=1, max_length=32)
    description: Optional[str] = None
    image: Optional[ImageUrl] = None
    copies: int = Field(..., ge=0)
    available: Optional[bool] = None


class BookUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    author: Optional[str] = Field(None, min_length=1, max_length=255)
    genre: Optional[Genre] = None
    isbn: Optional[str] = Field(None, min_length=1, max_length=32)
    description: Optional[str] = None
    image: Optional[ImageUrl] = None
    copies: Optional[int] = Field(None, ge=0)
    available: Optional[bool] = None


class BookResponse(BaseModel):
    id: str = Field(alias="_id")
    title: str
    author: str
    genre: Genre
    isbn: str
    description: Optional[str]
    image: Optional[str]
    copies: int
    available: bool
    created_at: datetime
    updated_at: datetime

    model_config = CAMEL_OUTPUT
