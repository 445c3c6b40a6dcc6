"""
Unit tests for catalog.schemas – request validation and camelCase response shapes.
"""
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from pydantic import ValidationError

from catalog.db.models import Genre
from catalog.schemas.book import BookCreate, BookUpdate, BookResponse
from catalog.schemas.borrow import BorrowCreate, BorrowRecordResponse, BorrowSummaryItem
from catalog.schemas.common import ApiResponse, ErrorResponse, ErrorDetail


class TestBookCreate:
    def _valid(self, **overrides):
        data = {
            "title": "Dune",
            "author": "Frank Herbert",
            "genre": "FANTASY",
            "isbn": "9780441013593",
            "copies": 3,
        }
        data.update(overrides)
        return data

    def test_valid(self):
        book = BookCreate(**self._valid())
        assert book.genre == Genre.FANTASY
        assert book.available is None

    def test_empty_title_rejected(self):
        with pytest.raises(ValidationError):
            BookCreate(**self._valid(title=""))

    def test_empty_isbn_rejected(self):
        with pytest.raises(ValidationError):
            BookCreate(**self._valid(isbn=""))

    def test_unknown_genre_rejected(self):
        with pytest.raises(ValidationError):
            BookCreate(**self._valid(genre="POETRY"))

    def test_negative_copies_rejected(self):
        with pytest.raises(ValidationError):
            BookCreate(**self._valid(copies=-1))

    def test_zero_copies_allowed(self):
        assert BookCreate(**self._valid(copies=0)).copies == 0

    def test_copies_required(self):
        data = self._valid()
        del data["copies"]
        with pytest.raises(ValidationError):
            BookCreate(**data)

    def test_invalid_image_url(self):
        with pytest.raises(ValidationError):
            BookCreate(**self._valid(image="not a url"))

    def test_image_dumps_as_string(self):
        book = BookCreate(**self._valid(image="https://covers.example.com/dune.jpg"))
        dumped = book.model_dump(mode="json", exclude_none=True)
        assert dumped["image"] == "https://covers.example.com/dune.jpg"
        assert dumped["genre"] == "FANTASY"
        assert "available" not in dumped

    def test_image_kept_as_sent(self):
        book = BookCreate(**self._valid(image="https://example.com"))
        assert book.model_dump(mode="json")["image"] == "https://example.com"


class TestBookUpdate:
    def test_all_optional(self):
        assert BookUpdate().model_dump(exclude_unset=True) == {}

    def test_partial(self):
        update = BookUpdate(copies=0)
        assert update.model_dump(exclude_unset=True) == {"copies": 0}

    def test_negative_copies_rejected(self):
        with pytest.raises(ValidationError):
            BookUpdate(copies=-2)


class TestBorrowCreate:
    def test_camel_case_input(self):
        borrow = BorrowCreate(**{"book": "abc", "quantity": 2, "dueDate": "2030-01-15"})
        assert borrow.due_date == datetime(2030, 1, 15, tzinfo=timezone.utc)

    def test_zulu_datetime(self):
        borrow = BorrowCreate(book="abc", quantity=1, dueDate="2030-01-15T10:30:00.000Z")
        assert borrow.due_date == datetime(2030, 1, 15, 10, 30, tzinfo=timezone.utc)

    def test_offset_converted_to_utc(self):
        borrow = BorrowCreate(book="abc", quantity=1, dueDate="2030-01-15T10:30:00+02:00")
        assert borrow.due_date == datetime(2030, 1, 15, 8, 30, tzinfo=timezone.utc)
        assert borrow.due_date.utcoffset().total_seconds() == 0

    def test_invalid_date(self):
        with pytest.raises(ValidationError, match="Invalid date"):
            BorrowCreate(book="abc", quantity=1, dueDate="next tuesday")

    def test_zero_quantity_rejected(self):
        with pytest.raises(ValidationError):
            BorrowCreate(book="abc", quantity=0, dueDate="2030-01-15")

    def test_negative_quantity_rejected(self):
        with pytest.raises(ValidationError):
            BorrowCreate(book="abc", quantity=-3, dueDate="2030-01-15")

    def test_empty_book_rejected(self):
        with pytest.raises(ValidationError):
            BorrowCreate(book="", quantity=1, dueDate="2030-01-15")


class TestResponses:
    def _now(self):
        return datetime(2030, 1, 1, tzinfo=timezone.utc)

    def test_book_response_serializes_camel_case(self):
        orm = SimpleNamespace(
            id="b-1", title="Dune", author="Frank Herbert", genre=Genre.FANTASY,
            isbn="9780441013593", description=None, image=None, copies=2,
            available=True, created_at=self._now(), updated_at=self._now(),
        )
        data = BookResponse.model_validate(orm).model_dump(by_alias=True, mode="json")
        assert data["_id"] == "b-1"
        assert "createdAt" in data and "updatedAt" in data
        assert data["genre"] == "FANTASY"

    def test_borrow_record_response(self):
        orm = SimpleNamespace(
            id="r-1", book_id="b-1", quantity=2, due_date=self._now(),
            created_at=self._now(), updated_at=self._now(),
        )
        data = BorrowRecordResponse.model_validate(orm).model_dump(by_alias=True)
        assert data["_id"] == "r-1"
        assert data["book"] == "b-1"
        assert data["dueDate"] == self._now()

    def test_summary_item(self):
        item = BorrowSummaryItem.model_validate(
            {"book": {"title": "Dune", "isbn": "123"}, "total_quantity": 4}
        )
        assert item.model_dump(by_alias=True) == {
            "book": {"title": "Dune", "isbn": "123"},
            "totalQuantity": 4,
        }

    def test_envelope(self):
        envelope = ApiResponse[int](message="ok", data=3)
        assert envelope.model_dump() == {"success": True, "message": "ok", "data": 3}

    def test_error_envelope_omits_empty_errors(self):
        assert ErrorResponse(message="Book not found").model_dump(exclude_none=True) == {
            "success": False,
            "message": "Book not found",
        }

    def test_error_envelope_with_errors(self):
        body = ErrorResponse(
            message="Validation failed",
            errors=[ErrorDetail(field="title", message="required")],
        )
        assert body.model_dump()["errors"] == [{"field": "title", "message": "required"}]
