"""
Products router - Catalog queries, product creation and quantity uploads.

List endpoints return a JSON array, or newline-delimited JSON when the
client asks for a stream (``Accept: application/x-ndjson`` or
``application/stream+json``).
"""

import os
import logging
import tempfile
import shutil
from pathlib import Path
from typing import Iterable, List, Optional, Union

from fastapi import APIRouter, Body, Depends, File, HTTPException, Query, Request, UploadFile, status
from fastapi.responses import StreamingResponse
from pydantic import BaseModel

from api.config import settings
from api.dependencies import get_current_user, get_product_service, get_upload_product_service
from backend.models.dto import FileUploadDto, ProductAdminDto, ProductDto
from backend.models.enums import Brand
from services.product_service import ProductService
from services.upload_product_service import SpreadsheetUpload, UploadProductService

logger = logging.getLogger(__name__)

# Create router
router = APIRouter(tags=['products'])

STREAM_MEDIA_TYPES = ('application/x-ndjson', 'application/stream+json')


def _stream_media_type(request: Request) -> Optional[str]:
    """Return the streaming media type the client accepts, if any."""
    accept = request.headers.get('accept', '')
    for media_type in STREAM_MEDIA_TYPES:
        if media_type in accept:
            return media_type
    return None


def _respond(request: Request, items: Iterable[BaseModel], status_code: int = status.HTTP_200_OK):
    """
    Return items as a list, or as an NDJSON stream when requested.

    The plain list is serialized by the route's response_model.
    """
    media_type = _stream_media_type(request)
    if media_type is None:
        return items

    def iter_lines():
        for item in items:
            yield item.model_dump_json() + '\n'

    return StreamingResponse(iter_lines(), status_code=status_code, media_type=media_type)


@router.get('/all', response_model=List[ProductDto])
def find_products_by_name_or_brand(
    request: Request,
    name: Optional[str] = Query(None, description="Exact product name"),
    brand: Optional[str] = Query(None, description="Brand display name or member name"),
    service: ProductService = Depends(get_product_service)
):
    """
    Find products by name OR brand.

    At least one of `name` and `brand` is required.

    **Example:**
    ```bash
    curl "http://localhost:8000/api/v1/all?name=AAA&brand=English%20Laundry"
    ```
    """
    logger.debug(f"find_products_by_name_or_brand: {name}, {brand}")

    if name is None and brand is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Neither name nor brand had been set as request param."
        )

    parsed_brand = None
    if brand is not None:
        try:
            parsed_brand = Brand.parse(brand)
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return _respond(request, service.find_products_by_name_or_brand(name, parsed_brand))


@router.get('/admin/all', response_model=List[ProductAdminDto])
def find_all(
    request: Request,
    service: ProductService = Depends(get_product_service)
):
    """
    List every product in its full entity representation (audit fields
    and version included), for administrative needs.
    """
    logger.debug("find_all")

    return _respond(request, service.find_all())


@router.get('/last', response_model=List[ProductDto])
def find_last_products(
    request: Request,
    last_size: int = Query(
        settings.DEFAULT_LAST_SIZE,
        ge=1,
        alias='lastSize',
        description="Quantity threshold (inclusive)"
    ),
    service: ProductService = Depends(get_product_service)
):
    """
    List products whose quantity is less than or equal to `lastSize`.

    **Example:**
    ```bash
    curl "http://localhost:8000/api/v1/last?lastSize=3"
    ```
    """
    logger.debug(f"find_last_products: {last_size}")

    return _respond(request, service.find_last_products(last_size))


@router.post('', response_model=List[ProductDto], status_code=status.HTTP_201_CREATED)
def create_products(
    request: Request,
    products: Union[List[ProductDto], ProductDto] = Body(..., description="One product or an array of products"),
    service: ProductService = Depends(get_product_service),
    current_user: str = Depends(get_current_user)
):
    """
    Create a set of products.

    The whole batch is rejected with 409 if any article/size pair already
    exists. Created products record the caller as creator.
    """
    if isinstance(products, ProductDto):
        products = [products]

    logger.info(f"Create request from {current_user}: {len(products)} products")

    created = service.create_products(products, current_user)
    return _respond(request, created, status_code=status.HTTP_201_CREATED)


@router.patch('', response_model=List[FileUploadDto], status_code=status.HTTP_202_ACCEPTED)
def patch_product_quantity(
    request: Request,
    file: List[UploadFile] = File(..., description="Quantity spreadsheets (.xlsx or .xlsm)"),
    service: UploadProductService = Depends(get_upload_product_service),
    current_user: str = Depends(get_current_user)
):
    """
    Add the quantities listed in the uploaded spreadsheets to the matching
    products.

    Rows are matched by article and size; rows matching no product are
    counted as `unmatched` and skipped.

    **Spreadsheet layout** (first sheet, header row required):

    | article | name | quantity | size |
    |---|---|---|---|
    | 120589 | Eau de Parfum | 7 | 50 |
    """
    logger.info(f"Quantity upload from {current_user}: {[f.filename for f in file]}")

    temp_paths = []
    try:
        uploads = []
        for part in file:
            fd, temp_path = tempfile.mkstemp(
                suffix=Path(part.filename or '').suffix,
                dir=settings.TEMP_UPLOAD_DIR
            )
            temp_paths.append(temp_path)

            with os.fdopen(fd, 'wb') as tmp:
                shutil.copyfileobj(part.file, tmp)

            uploads.append(SpreadsheetUpload(file_name=part.filename or Path(temp_path).name, path=temp_path))

        results = service.patch_product_quantity(uploads, current_user)

    finally:
        for temp_path in temp_paths:
            if os.path.exists(temp_path):
                os.unlink(temp_path)

    return _respond(request, results, status_code=status.HTTP_202_ACCEPTED)
