"""
Catalog repository.

Entity-store operations used by the bulk record handlers and the exporter.
Methods only flush: the caller owns the transaction (one per bulk batch).
"""
from decimal import Decimal
from typing import Any, List, Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.orm import Session, joinedload

from app.models.catalog import Category, Product, ProductStatus, ProductVariant


class CatalogRepository:
    """Repository for products, categories and variants."""

    def __init__(self, db: Session):
        """
        Initialize repository with database session.

        Args:
            db: SQLAlchemy database session
        """
        self.db = db

    def get_product(self, product_id: int) -> Optional[Product]:
        return self.db.get(Product, product_id)

    def get_category(self, category_id: int) -> Optional[Category]:
        return self.db.get(Category, category_id)

    def create_product(self, **fields: Any) -> Product:
        """
        Create a product and flush it so constraint violations
        (duplicate slug, unknown category) surface on this row.
        """
        product = Product(**fields)
        self.db.add(product)
        self.db.flush()
        return product

    def update_product(self, product: Product, **fields: Any) -> Product:
        for key, value in fields.items():
            setattr(product, key, value)
        self.db.flush()
        return product

    def set_status(self, product: Product, status: ProductStatus) -> Product:
        return self.update_product(product, status=status)

    def set_price(self, product: Product, price: Decimal) -> Product:
        return self.update_product(product, price=price)

    def set_category(self, product: Product, category: Category) -> Product:
        return self.update_product(product, category_id=category.id)

    def create_variant(self, product: Product, **fields: Any) -> ProductVariant:
        variant = ProductVariant(product_id=product.id, **fields)
        self.db.add(variant)
        self.db.flush()
        return variant

    def delete_variants(self, product_id: int, variant_ids: Sequence[int]) -> int:
        """
        Delete variants of one product.

        Returns:
            Number of deleted rows
        """
        result = self.db.execute(
            delete(ProductVariant).where(
                ProductVariant.id.in_(variant_ids),
                ProductVariant.product_id == product_id,
            )
        )
        return result.rowcount or 0

    def list_products_for_export(self) -> List[Product]:
        """All products with their category loaded."""
        stmt = (
            select(Product)
            .options(joinedload(Product.category))
            .order_by(Product.id)
        )
        return list(self.db.scalars(stmt).unique())

    def list_variants_for_export(self) -> List[ProductVariant]:
        """All variants with their parent product loaded."""
        stmt = (
            select(ProductVariant)
            .options(joinedload(ProductVariant.product))
            .order_by(ProductVariant.id)
        )
        return list(self.db.scalars(stmt).unique())

