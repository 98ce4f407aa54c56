"""
Upload Product Service - apply quantity spreadsheets to the catalog.

Each uploaded workbook lists stock arrivals, one row per product:

    article | name          | quantity | size
    120589  | Eau de Parfum | 7        | 50

Rows are matched to stored products by (article, size) and their quantity
is added to the stored quantity. Rows that match nothing are reported and
skipped.
"""

import logging
import math
from collections import OrderedDict
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, NamedTuple, Optional, Tuple

import openpyxl
from sqlalchemy.orm import Session

from backend.dao.product_dao import ProductDao
from backend.models.dto import FileUploadDto
from backend.models.enums import Size
from backend.models.schema import BIGINT_MAX, ProductUpload
from services.exceptions import UploadFormatError, UploadTooLargeError
from services.storage_service import StorageService

logger = logging.getLogger(__name__)

# Default configuration (can be overridden)
DEFAULT_ALLOWED_EXTENSIONS = ('.xlsx', '.xlsm')
DEFAULT_MAX_FILE_SIZE_MB = 20
REQUIRED_COLUMNS = ('article', 'quantity', 'size')


class SpreadsheetUpload(NamedTuple):
    """An uploaded spreadsheet saved to local disk."""
    file_name: str
    path: str


class ParsedSheet(NamedTuple):
    """Quantity deltas read from one sheet."""
    deltas: 'OrderedDict[Tuple[int, Size], int]'
    row_counts: Dict[Tuple[int, Size], int]
    total_rows: int
    invalid: int


def _to_int(value: Any) -> int:
    """Coerce a spreadsheet cell to int; floats must be whole numbers."""
    if isinstance(value, bool):
        raise ValueError(f"Not an integer: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value) or not value.is_integer():
            raise ValueError(f"Not an integer: {value!r}")
        return int(value)

    text = str(value).strip()
    try:
        return int(text)
    except ValueError:
        number = float(text)
        if not math.isfinite(number) or not number.is_integer():
            raise ValueError(f"Not an integer: {value!r}") from None
        return int(number)


def _is_blank(row: Tuple) -> bool:
    return all(v is None or (isinstance(v, str) and not v.strip()) for v in row)


class UploadProductService:
    """
    Framework-agnostic service that patches product quantities from spreadsheets.
    """

    def __init__(
        self,
        db_session: Session,
        storage: StorageService,
        progress_callback: Optional[Callable[[str, float, str], None]] = None,
        allowed_extensions: Iterable[str] = DEFAULT_ALLOWED_EXTENSIONS,
        max_file_size_mb: int = DEFAULT_MAX_FILE_SIZE_MB,
        reject_duplicates: bool = False
    ):
        """
        Initialize upload service.

        Args:
            db_session: SQLAlchemy database session
            storage: Storage service keeping copies of applied spreadsheets
            progress_callback: Optional callback for progress updates
                              Signature: callback(stage: str, percent: float, message: str)
            allowed_extensions: Accepted spreadsheet extensions
            max_file_size_mb: Largest accepted spreadsheet
            reject_duplicates: Skip files whose content was already applied
        """
        self.session = db_session
        self.storage = storage
        self.dao = ProductDao(db_session)
        self.progress_callback = progress_callback or (lambda *args: None)
        self.allowed_extensions = list(allowed_extensions)
        self.max_file_size_mb = max_file_size_mb
        self.reject_duplicates = reject_duplicates

    def _emit_progress(self, stage: str, percent: float, message: str):
        """Emit progress update via callback."""
        self.progress_callback(stage, percent, message)
        logger.debug(f"Progress: {stage} ({percent:.1f}%) - {message}")

    def patch_product_quantity(self, files: Iterable[SpreadsheetUpload],
                               user_name: Optional[str]) -> List[FileUploadDto]:
        """
        Apply every uploaded spreadsheet in order.

        All files are checked (extension, size) and parsed before any of
        them is applied, so a malformed file rejects the whole request with
        nothing changed. Files are then committed one by one; a failure
        while applying a file rolls back that file and leaves earlier files
        applied.

        Args:
            files: Spreadsheets saved to local disk
            user_name: Acting user, recorded on products and the upload ledger

        Returns:
            One FileUploadDto per file

        Raises:
            UploadFormatError: Disallowed extension, unreadable file or missing required columns
            UploadTooLargeError: A file exceeds max_file_size_mb
        """
        files = list(files)

        parsed_files = []
        for upload in files:
            self.check_file(upload.file_name, upload.path)
            self._emit_progress('parsing', 5, f"Reading {upload.file_name}")
            parsed_files.append(self.read_quantity_rows(upload.path))

        results = []
        for index, (upload, parsed) in enumerate(zip(files, parsed_files)):
            logger.info(f"Applying quantity file {index + 1}/{len(files)}: {upload.file_name}")
            results.append(self._apply_file(upload.file_name, upload.path, parsed, user_name))

        return results

    def patch_from_file(self, file_name: str, file_path: str, user_name: Optional[str]) -> FileUploadDto:
        """
        Apply one quantity spreadsheet.

        Raises:
            UploadFormatError: Disallowed extension or missing required columns
            UploadTooLargeError: File exceeds max_file_size_mb
        """
        return self.patch_product_quantity([SpreadsheetUpload(file_name, file_path)], user_name)[0]

    def check_file(self, file_name: str, file_path: str):
        """Reject files with a disallowed extension or over the size limit."""
        if not self.storage.validate_file_extension(file_name, self.allowed_extensions):
            raise UploadFormatError(
                f"File extension '{Path(file_name).suffix}' not allowed. "
                f"Allowed extensions: {', '.join(self.allowed_extensions)}"
            )

        size_mb = self.storage.get_file_size_mb(file_path)
        if size_mb > self.max_file_size_mb:
            raise UploadTooLargeError(
                f"File size ({size_mb:.1f} MB) exceeds maximum allowed ({self.max_file_size_mb} MB)"
            )

    def _apply_file(self, file_name: str, file_path: str, parsed: ParsedSheet,
                    user_name: Optional[str]) -> FileUploadDto:
        try:
            # Step 1: Hash (10%)
            self._emit_progress('hashing', 10, f"Computing hash of {file_name}")
            file_hash = self.storage.compute_file_hash(file_path)

            if self.reject_duplicates:
                existing = self.session.query(ProductUpload)\
                    .filter_by(file_hash=file_hash)\
                    .order_by(ProductUpload.id)\
                    .first()
                if existing:
                    logger.info(f"{file_name} already applied as upload {existing.id}, skipping")
                    return FileUploadDto(
                        upload_id=existing.id,
                        file_name=file_name,
                        file_hash=file_hash,
                        created_by=user_name,
                        uploaded_at=existing.uploaded_at,
                        duplicate=True
                    )

            # Step 2: Apply deltas (50-90%)
            self._emit_progress('applying', 50, f"Applying {len(parsed.deltas)} quantity updates")
            matched, unmatched = self.apply_deltas(parsed, user_name)

            # Step 3: Record upload (95%)
            self._emit_progress('finalizing', 95, 'Recording upload')
            stored_path = self.storage.store_file(file_path, file_hash)
            upload = ProductUpload(
                file_name=file_name,
                file_hash=file_hash,
                file_path=stored_path,
                created_by=user_name,
                summary={
                    'total_rows': parsed.total_rows,
                    'matched': matched,
                    'unmatched': unmatched,
                    'invalid': parsed.invalid,
                    'applied_at': datetime.utcnow().isoformat()
                }
            )
            self.session.add(upload)
            self.session.flush()

            self.session.commit()

        except Exception as e:
            logger.error(f"Quantity patch from {file_name} failed: {e}")
            self.session.rollback()
            raise

        logger.info(f"Applied {file_name}: {matched} matched, {unmatched} unmatched, "
                    f"{parsed.invalid} invalid of {parsed.total_rows} rows")
        self._emit_progress('complete', 100, f"{file_name} applied")

        return FileUploadDto(
            upload_id=upload.id,
            file_name=file_name,
            file_hash=file_hash,
            created_by=user_name,
            uploaded_at=upload.uploaded_at,
            total_rows=parsed.total_rows,
            matched=matched,
            unmatched=unmatched,
            invalid=parsed.invalid
        )

    def read_quantity_rows(self, file_path: str) -> ParsedSheet:
        """
        Read quantity deltas from the first worksheet.

        The first row is the header. Columns are located by name
        (case-insensitive), so their order does not matter. Rows sharing an
        article and size are summed.

        Raises:
            UploadFormatError: If the sheet is empty or required columns are missing
        """
        try:
            wb = openpyxl.load_workbook(file_path, read_only=True, data_only=True)
        except Exception as e:
            raise UploadFormatError(f"Cannot read spreadsheet: {e}") from e

        try:
            ws = wb.worksheets[0]
            rows = ws.iter_rows(values_only=True)

            header = next(rows, None)
            if header is None:
                raise UploadFormatError("Spreadsheet is empty")

            columns = {}
            for idx, title in enumerate(header):
                if title is not None:
                    columns.setdefault(str(title).strip().lower(), idx)

            missing = [c for c in REQUIRED_COLUMNS if c not in columns]
            if missing:
                raise UploadFormatError(f"Missing required columns: {', '.join(missing)}")

            deltas: 'OrderedDict[Tuple[int, Size], int]' = OrderedDict()
            row_counts: Dict[Tuple[int, Size], int] = {}
            total_rows = 0
            invalid = 0

            for row_num, row in enumerate(rows, 2):
                if _is_blank(row):
                    continue
                total_rows += 1

                try:
                    article = _to_int(self._cell(row, columns['article']))
                    quantity = _to_int(self._cell(row, columns['quantity']))
                    size = Size.parse(self._cell(row, columns['size']))
                    if not 0 < article <= BIGINT_MAX or not 0 <= quantity <= BIGINT_MAX:
                        raise ValueError(f"article={article}, quantity={quantity} out of range")
                    key = (article, size)
                    if deltas.get(key, 0) + quantity > BIGINT_MAX:
                        raise ValueError(f"total quantity for article {article} {size.name} out of range")
                except (TypeError, ValueError) as e:
                    invalid += 1
                    logger.warning(f"Skipping row {row_num}: {e}")
                    continue

                deltas[key] = deltas.get(key, 0) + quantity
                row_counts[key] = row_counts.get(key, 0) + 1

            return ParsedSheet(deltas, row_counts, total_rows, invalid)
        finally:
            wb.close()

    @staticmethod
    def _cell(row: Tuple, index: int) -> Any:
        value = row[index] if index < len(row) else None
        if value is None:
            raise ValueError(f"Empty cell in column {index + 1}")
        return value

    def apply_deltas(self, parsed: ParsedSheet, user_name: Optional[str]) -> Tuple[int, int]:
        """
        Add each delta to the matching product.

        Returns:
            (matched rows, unmatched rows)
        """
        matched = 0
        unmatched = 0
        total = max(len(parsed.deltas), 1)

        for i, ((article, size), delta) in enumerate(parsed.deltas.items()):
            rows = parsed.row_counts[(article, size)]

            if self.dao.add_quantity(article, size, delta, user_name):
                matched += rows
                logger.debug(f"Added {delta} to article {article} {size.name}")
            else:
                unmatched += rows
                logger.info(f"No product with article {article} and {size.name}, skipping")

            self._emit_progress('applying', 50 + 40 * ((i + 1) / total),
                                f"Applied {i + 1}/{len(parsed.deltas)}")

        return matched, unmatched
