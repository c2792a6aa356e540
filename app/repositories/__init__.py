"""
Repository layer for database operations.

- CatalogRepository: products, categories and variants (flush only, the
  caller owns the transaction)
- BulkOperationRepository: bulk operation history
"""
from app.repositories.bulk_operation_repository import BulkOperationRepository
from app.repositories.catalog_repository import CatalogRepository

__all__ = [
    'BulkOperationRepository',
    'CatalogRepository',
]
