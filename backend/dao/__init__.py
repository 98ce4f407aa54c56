"""Data access objects for the product store."""
from backend.dao.product_dao import ProductDao

__all__ = ['ProductDao']
