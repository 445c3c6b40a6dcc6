from typing import Optional, List

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.core.logging import get_logger
from catalog.db.models import Book, Genre

logger = get_logger("services.book")

# Query-string sort names (camelCase from the web client, snake_case accepted too)
SORTABLE_COLUMNS = {
    "title": Book.title,
    "author": Book.author,
    "genre": Book.genre,
    "isbn": Book.isbn,
    "copies": Book.copies,
    "available": Book.available,
    "createdAt": Book.created_at,
    "created_at": Book.created_at,
    "updatedAt": Book.updated_at,
    "updated_at": Book.updated_at,
}


def _derive_available(copies: int, requested: Optional[bool]) -> bool:
    """A book with no copies is never available; otherwise honour an explicit flag."""
    if copies <= 0:
        return False
    return True if requested is None else requested


async def create_book(db: AsyncSession, data: dict) -> Book:
    """Create a new book."""
    copies = data.get("copies", 0)
    data["available"] = _derive_available(copies, data.get("available"))

    book = Book(**data)
    db.add(book)
    await db.flush()
    await db.refresh(book)

    logger.info(f"Book created: id={book.id} title='{book.title}' copies={book.copies}")
    return book


async def get_books(
    db: AsyncSession,
    genre: Optional[Genre] = None,
    sort_by: str = "createdAt",
    sort_order: str = "desc",
    limit: int = 10,
) -> List[Book]:
    """List books filtered by genre, sorted by one column, capped at ``limit``."""
    query = select(Book)

    if genre:
        query = query.where(Book.genre == genre)

    sort_column = SORTABLE_COLUMNS.get(sort_by, Book.created_at)
    if sort_order == "asc":
        query = query.order_by(sort_column.asc())
    else:
        query = query.order_by(sort_column.desc())

    query = query.limit(limit)

    result = await db.execute(query)
    return list(result.scalars().all())


async def get_book_by_id(db: AsyncSession, book_id: str) -> Optional[Book]:
    """Get a single book by ID."""
    result = await db.execute(select(Book).where(Book.id == book_id))
    return result.scalar_one_or_none()


async def update_book(db: AsyncSession, book_id: str, data: dict) -> Optional[Book]:
    """Apply a partial update; ``None`` values are ignored."""
    book = await get_book_by_id(db, book_id)
    if not book:
        return None

    changes = {key: value for key, value in data.items() if value is not None}
    for key, value in changes.items():
        setattr(book, key, value)

    # A copies change without an explicit flag re-derives availability.
    if "copies" in changes or "available" in changes:
        book.available = _derive_available(book.copies, changes.get("available"))

    await db.flush()
    await db.refresh(book)

    logger.info(f"Book updated: id={book_id} fields={sorted(changes)}")
    return book


async def delete_book(db: AsyncSession, book_id: str) -> bool:
    """Delete a book. Borrow records referencing it are left in place."""
    book = await get_book_by_id(db, book_id)
    if not book:
        return False

    await db.delete(book)
    await db.flush()

    logger.info(f"Book deleted: id={book_id}")
    return True


async def recompute_availability(db: AsyncSession, book_id: str) -> None:
    """Set ``available`` from the stored copy count."""
    await db.execute(
        update(Book)
        .where(Book.id == book_id)
        .values(available=Book.copies > 0)
        .execution_options(synchronize_session=False)
    )
