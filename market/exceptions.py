"""
Exception hierarchy for the marketplace core.
"""


class MarketError(Exception):
    """Base class for marketplace errors. ``str(exc)`` is safe to show to users."""


class CatalogSyncError(MarketError):
    """Raised on invalid controller state transitions."""


class UnknownProductError(MarketError):
    def __init__(self, product_id: int):
        super().__init__(f"Product {product_id} not found")
        self.product_id = product_id


class MutationInProgressError(MarketError):
    def __init__(self, product_id: int):
        super().__init__(f"Another change to product {product_id} is still in progress")
        self.product_id = product_id


class CartError(MarketError):
    pass


class CheckoutError(MarketError):
    pass


class RegistrationError(MarketError):
    pass


class AuthenticationError(MarketError):
    pass


class OrderError(MarketError):
    pass
