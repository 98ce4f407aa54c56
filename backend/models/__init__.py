"""Models package for the warehouse product catalog."""
from backend.models.enums import Brand, Size
from backend.models.schema import Base, Product, ProductUpload

__all__ = ['Base', 'Brand', 'Size', 'Product', 'ProductUpload']
