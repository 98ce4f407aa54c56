"""
Product DAO - the only component that queries the product store.
"""

import logging
from typing import Iterable, List, Optional

from sqlalchemy import func, or_, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backend.models.enums import Brand, Size
from backend.models.schema import Product
from services.exceptions import DuplicateProductError

logger = logging.getLogger(__name__)


class ProductDao:
    """
    Data access object for ``Product`` documents.

    Methods flush but never commit; transaction boundaries belong to
    the calling service.
    """

    def __init__(self, session: Session):
        """
        Initialize the DAO.

        Args:
            session: SQLAlchemy database session
        """
        self.session = session

    def find_all(self) -> List[Product]:
        """Retrieve every product ordered by id."""
        return self.session.query(Product).order_by(Product.id).all()

    def find_by_name_or_brand(self, name: Optional[str], brand: Optional[Brand]) -> List[Product]:
        """
        Retrieve products matching the name OR the brand.

        Args:
            name: Exact product name (optional)
            brand: Brand (optional)

        Returns:
            Matching products, or an empty list when neither criterion is set
        """
        criteria = []
        if name is not None:
            criteria.append(Product.name == name)
        if brand is not None:
            criteria.append(Product.brand == brand)

        if not criteria:
            return []

        return self.session.query(Product)\
            .filter(or_(*criteria))\
            .order_by(Product.id)\
            .all()

    def find_by_quantity_lte(self, last_size: int) -> List[Product]:
        """Retrieve products whose quantity is less than or equal to ``last_size``."""
        return self.session.query(Product)\
            .filter(Product.quantity <= last_size)\
            .order_by(Product.quantity, Product.id)\
            .all()

    def find_by_article_and_size(self, article: int, size: Size) -> Optional[Product]:
        """Retrieve the product identified by article and size."""
        return self.session.query(Product)\
            .filter_by(article=article, size=size)\
            .first()

    def insert(self, products: Iterable[Product]) -> List[Product]:
        """
        Insert a batch of products.

        Raises:
            DuplicateProductError: If an article/size pair is already stored
        """
        products = list(products)
        self.session.add_all(products)

        try:
            self.session.flush()
        except IntegrityError as e:
            raise DuplicateProductError(
                "A product with the same article and size already exists"
            ) from e

        logger.debug(f"Inserted {len(products)} products")
        return products

    def add_quantity(self, article: int, size: Size, delta: int, user_name: Optional[str]) -> int:
        """
        Atomically add ``delta`` to the quantity of one product.

        The increment happens inside a single UPDATE statement so concurrent
        patches of the same product never lose an increment.
        Loaded instances are not refreshed; expire or re-query to see the
        new quantity.

        Returns:
            Number of products updated (0 when nothing matches)
        """
        stmt = update(Product)\
            .where(Product.article == article, Product.size == size)\
            .values(
                quantity=Product.quantity + delta,
                version=Product.version + 1,
                last_modified_by=user_name,
                last_modified_date=func.now()
            )\
            .execution_options(synchronize_session=False)

        result = self.session.execute(stmt)
        return result.rowcount

    def delete_all(self) -> int:
        """Delete every product. Returns the number of rows removed."""
        deleted = self.session.query(Product).delete(synchronize_session=False)
        logger.info(f"Deleted {deleted} products")
        return deleted
