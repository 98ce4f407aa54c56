"""
Product Service - catalog queries and product creation.

Delegates persistence to ProductDao and converts entities to DTOs.
"""

import logging
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from backend.models.dto import ProductAdminDto, ProductDto
from backend.dao.product_dao import ProductDao
from backend.models.enums import Brand

logger = logging.getLogger(__name__)


class ProductService:
    """Framework-agnostic product catalog service."""

    def __init__(self, db_session: Session):
        self.session = db_session
        self.dao = ProductDao(db_session)

    def find_products_by_name_or_brand(self, name: Optional[str], brand: Optional[Brand]) -> List[ProductDto]:
        """Products whose name equals ``name`` or whose brand equals ``brand``."""
        products = self.dao.find_by_name_or_brand(name, brand)
        logger.debug(f"find_products_by_name_or_brand({name!r}, {brand}): {len(products)} found")
        return [ProductDto.from_entity(p) for p in products]

    def create_products(self, product_dtos: Iterable[ProductDto], user_name: Optional[str]) -> List[ProductDto]:
        """
        Create a batch of products.

        All products are inserted in one transaction; if any article/size
        pair already exists nothing is created.

        Args:
            product_dtos: Products to create
            user_name: Acting user, recorded in the audit fields

        Returns:
            Created products, in input order

        Raises:
            DuplicateProductError: If an article/size pair already exists
        """
        entities = [dto.to_entity(user_name) for dto in product_dtos]

        try:
            self.dao.insert(entities)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        logger.info(f"Created {len(entities)} products for {user_name}")
        return [ProductDto.from_entity(p) for p in entities]

    def find_all(self) -> List[ProductAdminDto]:
        """Every product in its full entity representation."""
        return [ProductAdminDto.model_validate(p) for p in self.dao.find_all()]

    def find_last_products(self, last_size: int) -> List[ProductDto]:
        """
        Products running out of stock.

        Args:
            last_size: Quantity threshold (inclusive), must be >= 1

        Raises:
            ValueError: If last_size is below 1
        """
        if last_size < 1:
            raise ValueError(f"lastSize must be at least 1, got {last_size}")

        return [ProductDto.from_entity(p) for p in self.dao.find_by_quantity_lte(last_size)]
