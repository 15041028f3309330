from __future__ import annotations


class StorefrontError(Exception):
    """Base class for storefront domain errors."""


class ProductNotFound(StorefrontError):
    def __init__(self, product_id: int):
        super().__init__("Product not found")
        self.product_id = product_id


class ProductValidationError(StorefrontError):
    pass


class UnknownVariant(StorefrontError):
    def __init__(self, product_id: int, variant: str):
        super().__init__(f"Unknown variant '{variant}' for product {product_id}")
        self.product_id = product_id
        self.variant = variant
