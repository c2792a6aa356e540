from app.models.bulk_operation import BulkOperationLog
from app.models.catalog import Category, Product, ProductStatus, ProductVariant
from app.models.user_model import User

__all__ = [
    "BulkOperationLog",
    "Category",
    "Product",
    "ProductStatus",
    "ProductVariant",
    "User",
]
