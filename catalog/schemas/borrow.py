from datetime import date, datetime, timezone
from typing import Any
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from catalog.schemas.common import CAMEL_OUTPUT


class BorrowCreate(BaseModel):
    book: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0)
    due_date: datetime

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due_date(cls, value: Any) -> Any:
        """Accept ISO dates as well as datetimes; ``Z`` means UTC."""
        if isinstance(value, datetime):
            return value
        if isinstance(value, date):
            return datetime(value.year, value.month, value.day)
        if isinstance(value, str):
            text = value.strip()
            if text.endswith("Z"):
                text = text[:-1] + "+00:00"
            try:
                return datetime.fromisoformat(text)
            except ValueError:
                raise ValueError("Invalid date")
        return value

    @field_validator("due_date")
    @classmethod
    def to_utc(cls, value: datetime) -> datetime:
        """Store the UTC instant; naive values are taken as UTC already."""
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class BorrowRecordResponse(BaseModel):
    id: str = Field(alias="_id")
    book_id: str = Field(alias="book")
    quantity: int
    due_date: datetime
    created_at: datetime
    updated_at: datetime

    model_config = CAMEL_OUTPUT


class BorrowSummaryBook(BaseModel):
    title: str
    isbn: str


class BorrowSummaryItem(BaseModel):
    book: BorrowSummaryBook
    total_quantity: int

    model_config = CAMEL_OUTPUT
