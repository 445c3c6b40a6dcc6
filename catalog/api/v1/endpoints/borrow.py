from typing import Annotated, List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.core.exceptions import BookNotFoundError, InsufficientCopiesError, StoreError
from catalog.db.session import get_db
from catalog.schemas.borrow import BorrowCreate, BorrowRecordResponse, BorrowSummaryItem
from catalog.schemas.common import ApiResponse, ErrorResponse
from catalog.services.borrow import submit_borrow, compute_borrow_summary

router = APIRouter(prefix="/borrow", tags=["Borrow"])


@router.post(
    "",
    response_model=ApiResponse[BorrowRecordResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Borrow a book",
    description=(
        "Borrow `quantity` copies of a book until `dueDate`. The copy count is "
        "decremented atomically and `available` turns false when the last copy "
        "goes out."
    ),
    responses={
        201: {"description": "Book borrowed successfully"},
        400: {"model": ErrorResponse, "description": "Not enough copies, or invalid data"},
        404: {"model": ErrorResponse, "description": "Book not found"},
    },
)
async def borrow_book(
    data: BorrowCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    try:
        record = await submit_borrow(
            db, book_id=data.book, quantity=data.quantity, due_date=data.due_date
        )
    except BookNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except (InsufficientCopiesError, StoreError) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return ApiResponse[BorrowRecordResponse](
        message="Book borrowed successfully",
        data=BorrowRecordResponse.model_validate(record),
    )


@router.get(
    "",
    response_model=ApiResponse[List[BorrowSummaryItem]],
    summary="Borrowed books summary",
    description="Total quantity borrowed per book, with the book's title and ISBN.",
    responses={
        200: {"description": "Borrow summary"},
        400: {"model": ErrorResponse, "description": "Aggregation error"},
    },
)
async def borrow_summary(db: Annotated[AsyncSession, Depends(get_db)]):
    try:
        summary = await compute_borrow_summary(db)
    except StoreError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return ApiResponse[List[BorrowSummaryItem]](
        message="Borrowed books summary retrieved successfully",
        data=[BorrowSummaryItem.model_validate(item) for item in summary],
    )
