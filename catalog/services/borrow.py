from datetime import datetime
from typing import List, Tuple

from sqlalchemy import select, update, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.core.exceptions import BookNotFoundError, InsufficientCopiesError, StoreError
from catalog.core.logging import get_logger
from catalog.db.models import Book, BorrowRecord
from catalog.services.book import get_book_by_id, recompute_availability

logger = get_logger("services.borrow")


async def submit_borrow(
    db: AsyncSession,
    book_id: str,
    quantity: int,
    due_date: datetime,
) -> BorrowRecord:
    """Borrow ``quantity`` copies of a book until ``due_date``.

    The copy check and decrement are a single conditional UPDATE, so two
    concurrent borrows can never take the same copy. The decrement, the
    availability write and the record insert all run in the caller's
    transaction; on any failure the caller rolls back and nothing persists.

    Raises:
        BookNotFoundError: no book with ``book_id``.
        InsufficientCopiesError: fewer than ``quantity`` copies remain.
        StoreError: the database rejected one of the writes.
    """
    book = await get_book_by_id(db, book_id)
    if not book:
        raise BookNotFoundError(book_id)

    try:
        result = await db.execute(
            update(Book)
            .where(Book.id == book_id, Book.copies >= quantity)
            .values(copies=Book.copies - quantity)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await db.refresh(book)
            logger.warning(
                f"Borrow rejected: book={book_id} requested={quantity} copies={book.copies}"
            )
            raise InsufficientCopiesError(book_id, quantity, book.copies)

        await recompute_availability(db, book_id)

        record = BorrowRecord(book_id=book_id, quantity=quantity, due_date=due_date)
        db.add(record)
        await db.flush()
        await db.refresh(record)
        await db.refresh(book)
    except SQLAlchemyError as e:
        logger.error(f"Borrow failed for book={book_id}: {e}")
        raise StoreError(str(e)) from e

    logger.info(
        f"Book borrowed: record={record.id} book={book_id} quantity={quantity}",
        extra={"extra_data": {"copies_left": book.copies, "available": book.available}},
    )
    return record


def _quantity_totals():
    return select(
        BorrowRecord.book_id.label("book_id"),
        func.sum(BorrowRecord.quantity).label("total_quantity"),
    ).group_by(BorrowRecord.book_id)


async def group_quantities_by_book(db: AsyncSession) -> List[Tuple[str, int]]:
    """Total borrowed quantity per referenced book id."""
    result = await db.execute(_quantity_totals())
    return [(book_id, int(total)) for book_id, total in result.all()]


async def compute_borrow_summary(db: AsyncSession) -> List[dict]:
    """Group borrow records by book, then join each group to its book.

    Groups whose book has been deleted have nothing to join to and are
    dropped. Rows come back largest total first, ties by title.
    """
    totals = _quantity_totals().subquery()
    query = (
        select(Book.title, Book.isbn, totals.c.total_quantity)
        .join(totals, Book.id == totals.c.book_id)
        .order_by(totals.c.total_quantity.desc(), Book.title.asc())
    )

    try:
        result = await db.execute(query)
    except SQLAlchemyError as e:
        logger.error(f"Borrow summary aggregation failed: {e}")
        raise StoreError(str(e)) from e

    return [
        {"book": {"title": title, "isbn": isbn}, "total_quantity": int(total)}
        for title, isbn, total in result.all()
    ]
