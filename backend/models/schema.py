"""
SQLAlchemy models for the warehouse product catalog.

This module defines the database schema using SQLAlchemy ORM,
matching the schema defined in Alembic migrations.
"""

from sqlalchemy import (
    BigInteger, Column, Integer, String, Numeric, TIMESTAMP, JSON,
    CheckConstraint, Enum, Index, UniqueConstraint, func, text
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declarative_base

from backend.models.enums import Brand, Size

Base = declarative_base()

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), 'postgresql')

# Largest value a BIGINT column holds
BIGINT_MAX = 2 ** 63 - 1


class Product(Base):
    """A catalog product, identified for stock updates by article and size."""

    __tablename__ = 'products'
    __table_args__ = (
        UniqueConstraint('article', 'size', name='uq_products_article_size'),
        CheckConstraint('quantity >= 0', name='products_quantity_check'),
        CheckConstraint('price >= 0', name='products_price_check'),
        Index('idx_products_name', 'name'),
        Index('idx_products_brand', 'brand'),
        Index('idx_products_quantity', 'quantity'),
        {'comment': 'Warehouse product catalog'}
    )

    id = Column(
        Integer,
        primary_key=True,
        autoincrement=True,
        nullable=False
    )
    article = Column(
        BigInteger,
        nullable=False,
        comment='Catalog article number'
    )
    name = Column(
        String(255),
        nullable=False,
        comment='Product name'
    )
    brand = Column(
        Enum(Brand, name='brand', native_enum=False, length=50),
        nullable=False,
        comment='Brand (stored as enum member name)'
    )
    price = Column(
        Numeric(precision=12, scale=2),
        nullable=False,
        comment='Unit price'
    )
    quantity = Column(
        BigInteger,
        server_default='0',
        nullable=False,
        comment='Units in stock'
    )
    size = Column(
        Enum(Size, name='size', native_enum=False, length=20),
        nullable=False,
        comment='Bottle size (stored as enum member name)'
    )

    # Audit
    created_by = Column(
        String(255),
        nullable=True,
        comment='User who created the product'
    )
    last_modified_by = Column(
        String(255),
        nullable=True,
        comment='User who last changed the product'
    )
    created_date = Column(
        TIMESTAMP,
        server_default=text('CURRENT_TIMESTAMP'),
        nullable=False,
        comment='Creation timestamp'
    )
    last_modified_date = Column(
        TIMESTAMP,
        server_default=text('CURRENT_TIMESTAMP'),
        onupdate=func.now(),
        nullable=False,
        comment='Last modification timestamp'
    )
    version = Column(
        Integer,
        server_default='0',
        nullable=False,
        comment='Incremented on every quantity patch'
    )

    def __repr__(self):
        return (f"<Product(id={self.id}, article={self.article}, "
                f"size={self.size.name if self.size else None}, quantity={self.quantity})>")


class ProductUpload(Base):
    """Ledger entry for a processed quantity spreadsheet."""

    __tablename__ = 'product_uploads'
    __table_args__ = (
        Index('idx_product_uploads_hash', 'file_hash'),
        Index('idx_product_uploads_uploaded_at', 'uploaded_at'),
        {'comment': 'Processed quantity spreadsheets'}
    )

    id = Column(
        Integer,
        primary_key=True,
        autoincrement=True,
        nullable=False
    )
    file_name = Column(
        String(255),
        nullable=False,
        comment='Original spreadsheet filename'
    )
    file_hash = Column(
        String(64),
        nullable=False,
        comment='SHA256 hash for duplicate detection'
    )
    file_path = Column(
        String(512),
        nullable=True,
        comment='Path to stored copy (hash-based)'
    )
    created_by = Column(
        String(255),
        nullable=True,
        comment='User who uploaded the file'
    )
    uploaded_at = Column(
        TIMESTAMP,
        server_default=text('CURRENT_TIMESTAMP'),
        nullable=False,
        comment='Upload timestamp'
    )
    summary = Column(
        JSONType,
        nullable=False,
        default=dict,
        comment='Row statistics: total, matched, unmatched, invalid'
    )

    def __repr__(self):
        return f"<ProductUpload(id={self.id}, file_name='{self.file_name}', file_hash='{self.file_hash[:8]}...')>"
