class ShopError(Exception):
    """Base exception for shop-level errors."""


class InsufficientStock(ShopError):
    """Raised when fewer units are available than were requested."""

    def __init__(self, name, requested, available):
        self.name = name
        self.requested = requested
        self.available = available
        super().__init__(f"Only {available} of '{name}' in stock (requested {requested}).")


class CatalogUnavailable(ShopError):
    """Raised when the external card catalog cannot be reached."""


class ImportFailed(ShopError):
    """Raised when a catalog import could not insert anything."""
