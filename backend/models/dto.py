"""
Product data transfer objects.

Pydantic projections of catalog products and the result of a quantity
upload, shared by the services, the API and the CLI.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_serializer, field_validator

from backend.models.enums import Brand, Size
from backend.models.schema import BIGINT_MAX, Product


class ProductDto(BaseModel):
    """Product as exchanged with API clients."""

    article: int = Field(..., gt=0, le=BIGINT_MAX, description="Catalog article number")
    name: str = Field(..., min_length=1, max_length=255, description="Product name")
    brand: Brand = Field(..., description="Brand display name (member names are accepted too)")
    price: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2, description="Unit price")
    quantity: int = Field(0, ge=0, le=BIGINT_MAX, description="Units in stock")
    size: Size = Field(..., description="Bottle size, e.g. SIZE_50 (volumes like 50 are accepted too)")

    class Config:
        from_attributes = True
        json_schema_extra = {
            "example": {
                "article": 120589,
                "name": "Eau de Parfum",
                "brand": "Dolce & Gabbana",
                "price": 9.0,
                "quantity": 9,
                "size": "SIZE_50"
            }
        }

    @field_validator('brand', mode='before')
    @classmethod
    def parse_brand(cls, value):
        return Brand.parse(value)

    @field_validator('size', mode='before')
    @classmethod
    def parse_size(cls, value):
        return Size.parse(value)

    @field_serializer('price', when_used='json')
    def serialize_price(self, price: Decimal) -> float:
        return float(price)

    @classmethod
    def from_entity(cls, product: Product) -> 'ProductDto':
        """Create from a stored Product."""
        return cls.model_validate(product)

    def to_entity(self, user_name: Optional[str] = None) -> Product:
        """
        Build a new Product entity from this DTO.

        Args:
            user_name: Acting user, recorded as creator and last modifier
        """
        return Product(
            article=self.article,
            name=self.name,
            brand=self.brand,
            price=self.price,
            quantity=self.quantity,
            size=self.size,
            created_by=user_name,
            last_modified_by=user_name
        )


class ProductAdminDto(ProductDto):
    """Full entity representation for administrative listings."""

    id: int = Field(..., description="Product ID")
    created_by: Optional[str] = Field(None, description="User who created the product")
    last_modified_by: Optional[str] = Field(None, description="User who last changed the product")
    created_date: Optional[datetime] = Field(None, description="Creation timestamp")
    last_modified_date: Optional[datetime] = Field(None, description="Last modification timestamp")
    version: int = Field(0, description="Number of quantity patches applied")

    class Config:
        from_attributes = True


class FileUploadDto(BaseModel):
    """Outcome of applying one quantity spreadsheet."""

    upload_id: Optional[int] = Field(None, description="Upload ledger ID")
    file_name: str = Field(..., description="Original filename")
    file_hash: str = Field(..., description="SHA256 file hash")
    created_by: Optional[str] = Field(None, description="Uploading user")
    uploaded_at: Optional[datetime] = Field(None, description="Upload timestamp")
    total_rows: int = Field(0, description="Data rows read from the sheet")
    matched: int = Field(0, description="Rows applied to an existing product")
    unmatched: int = Field(0, description="Rows whose article/size matched no product")
    invalid: int = Field(0, description="Rows skipped because values could not be read")
    duplicate: bool = Field(False, description="Whether the file was already applied and skipped")

    class Config:
        json_schema_extra = {
            "example": {
                "upload_id": 7,
                "file_name": "products.xlsx",
                "file_hash": "a1b2c3d4e5f6...",
                "created_by": "admin",
                "uploaded_at": "2025-10-15T12:00:00Z",
                "total_rows": 3,
                "matched": 2,
                "unmatched": 1,
                "invalid": 0,
                "duplicate": False
            }
        }
