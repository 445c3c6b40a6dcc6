from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.core.config import settings
from catalog.db.models import Genre
from catalog.db.session import get_db
from catalog.schemas.book import BookCreate, BookUpdate, BookResponse
from catalog.schemas.common import ApiResponse, ErrorResponse
from catalog.services.book import (
    create_book,
    get_books,
    get_book_by_id,
    update_book,
    delete_book,
)

router = APIRouter(prefix="/books", tags=["Books"])

Db = Annotated[AsyncSession, Depends(get_db)]


@router.post(
    "",
    response_model=ApiResponse[BookResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create a book",
    description="Add a new book to the catalog. `available` is derived from `copies` unless given.",
    responses={
        201: {"description": "Book created successfully"},
        400: {"model": ErrorResponse, "description": "Validation or store error"},
    },
)
async def create_book_endpoint(data: BookCreate, db: Db):
    try:
        book = await create_book(db, data.model_dump(mode="json", exclude_none=True))
    except Exception as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return ApiResponse[BookResponse](
        message="Book created successfully", data=BookResponse.model_validate(book)
    )


@router.get(
    "",
    response_model=ApiResponse[List[BookResponse]],
    summary="List books",
    description="List books, optionally filtered by genre, sorted by one field and limited in count.",
    responses={
        200: {"description": "List of books"},
        400: {"model": ErrorResponse, "description": "Invalid query or store error"},
    },
)
async def list_books(
    db: Db,
    genre: Optional[Genre] = Query(None, alias="filter"),
    sort_by: str = Query("createdAt", alias="sortBy"),
    sort_order: str = Query("desc", alias="sort", pattern="^(asc|desc)$"),
    limit: int = Query(settings.DEFAULT_PAGE_LIMIT, ge=1, le=settings.MAX_PAGE_LIMIT),
):
    try:
        books = await get_books(
            db, genre=genre, sort_by=sort_by, sort_order=sort_order, limit=limit
        )
    except SQLAlchemyError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return ApiResponse[List[BookResponse]](
        message="Books retrieved successfully",
        data=[BookResponse.model_validate(book) for book in books],
    )


@router.get(
    "/{book_id}",
    response_model=ApiResponse[Optional[BookResponse]],
    summary="Get book details",
    description="Retrieve a single book by its ID. A missing book yields `data: null`.",
    responses={
        200: {"description": "Book details, or null"},
        400: {"model": ErrorResponse, "description": "Store error"},
    },
)
async def get_book(book_id: str, db: Db):
    try:
        book = await get_book_by_id(db, book_id)
    except SQLAlchemyError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return ApiResponse[Optional[BookResponse]](
        message="Book retrieved successfully",
        data=BookResponse.model_validate(book) if book else None,
    )


@router.patch(
    "/{book_id}",
    response_model=ApiResponse[BookResponse],
    summary="Update a book",
    description="Partially update a book. Setting `copies` re-derives `available`.",
    responses={
        200: {"description": "Book updated successfully"},
        400: {"model": ErrorResponse, "description": "Validation or store error"},
        404: {"model": ErrorResponse, "description": "Book not found"},
    },
)
async def update_book_endpoint(book_id: str, data: BookUpdate, db: Db):
    try:
        book = await update_book(db, book_id, data.model_dump(mode="json", exclude_unset=True))
    except SQLAlchemyError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if not book:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Book not found")
    return ApiResponse[BookResponse](
        message="Book updated successfully", data=BookResponse.model_validate(book)
    )


@router.delete(
    "/{book_id}",
    response_model=ApiResponse[None],
    summary="Delete a book",
    description="Delete a book. Its borrow records are kept and drop out of the summary.",
    responses={
        200: {"description": "Book deleted successfully"},
        400: {"model": ErrorResponse, "description": "Store error"},
    },
)
async def delete_book_endpoint(book_id: str, db: Db):
    try:
        await delete_book(db, book_id)
    except SQLAlchemyError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return ApiResponse[None](message="Book deleted successfully", data=None)
