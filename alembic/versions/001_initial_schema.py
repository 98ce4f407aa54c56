"""Initial schema for the warehouse product catalog

Revision ID: 001_initial_schema
Revises: 
Create Date: 2025-10-14

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create products table
    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('article', sa.BigInteger(), nullable=False, comment='Catalog article number'),
        sa.Column('name', sa.String(length=255), nullable=False, comment='Product name'),
        sa.Column('brand', sa.String(length=50), nullable=False, comment='Brand (stored as enum member name)'),
        sa.Column('price', sa.Numeric(precision=12, scale=2), nullable=False, comment='Unit price'),
        sa.Column('quantity', sa.BigInteger(), server_default='0', nullable=False, comment='Units in stock'),
        sa.Column('size', sa.String(length=20), nullable=False, comment='Bottle size (stored as enum member name)'),
        sa.Column('created_by', sa.String(length=255), nullable=True, comment='User who created the product'),
        sa.Column('last_modified_by', sa.String(length=255), nullable=True,
                  comment='User who last changed the product'),
        sa.Column('created_date', sa.TIMESTAMP(), server_default=sa.text('CURRENT_TIMESTAMP'),
                  nullable=False, comment='Creation timestamp'),
        sa.Column('last_modified_date', sa.TIMESTAMP(), server_default=sa.text('CURRENT_TIMESTAMP'),
                  nullable=False, comment='Last modification timestamp'),
        sa.Column('version', sa.Integer(), server_default='0', nullable=False,
                  comment='Incremented on every quantity patch'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('article', 'size', name='uq_products_article_size'),
        sa.CheckConstraint('quantity >= 0', name='products_quantity_check'),
        sa.CheckConstraint('price >= 0', name='products_price_check'),
        comment='Warehouse product catalog'
    )

    # Create indexes on products table
    op.create_index('idx_products_name', 'products', ['name'])
    op.create_index('idx_products_brand', 'products', ['brand'])
    op.create_index('idx_products_quantity', 'products', ['quantity'])

    # Create product_uploads table
    op.create_table(
        'product_uploads',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('file_name', sa.String(length=255), nullable=False, comment='Original spreadsheet filename'),
        sa.Column('file_hash', sa.String(length=64), nullable=False, comment='SHA256 hash for duplicate detection'),
        sa.Column('file_path', sa.String(length=512), nullable=True, comment='Path to stored copy (hash-based)'),
        sa.Column('created_by', sa.String(length=255), nullable=True, comment='User who uploaded the file'),
        sa.Column('uploaded_at', sa.TIMESTAMP(), server_default=sa.text('CURRENT_TIMESTAMP'),
                  nullable=False, comment='Upload timestamp'),
        sa.Column('summary', postgresql.JSONB(astext_type=sa.Text()), server_default='{}',
                  nullable=False, comment='Row statistics: total, matched, unmatched, invalid'),
        sa.PrimaryKeyConstraint('id'),
        comment='Processed quantity spreadsheets'
    )

    op.create_index('idx_product_uploads_hash', 'product_uploads', ['file_hash'])
    op.create_index('idx_product_uploads_uploaded_at', 'product_uploads', ['uploaded_at'])


def downgrade() -> None:
    op.drop_index('idx_product_uploads_uploaded_at', table_name='product_uploads')
    op.drop_index('idx_product_uploads_hash', table_name='product_uploads')
    op.drop_table('product_uploads')

    op.drop_index('idx_products_quantity', table_name='products')
    op.drop_index('idx_products_brand', table_name='products')
    op.drop_index('idx_products_name', table_name='products')
    op.drop_table('products')
