class CatalogError(Exception):
    """Base exception for catalog and borrow failures."""


class BookNotFoundError(CatalogError):
    """Referenced book id does not exist."""

    def __init__(self, book_id: str):
        self.book_id = book_id
        super().__init__("Book not found")


class InsufficientCopiesError(CatalogError):
    """Requested quantity exceeds the copies currently on the shelf."""

    def __init__(self, book_id: str, requested: int, available: int):
        self.book_id = book_id
        self.requested = requested
        self.available = available
        super().__init__("Not enough copies available")


class StoreError(CatalogError):
    """Underlying persistence failure."""
