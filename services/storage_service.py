"""
Storage Service - Keeps copies of uploaded quantity spreadsheets.

Every applied spreadsheet is copied into the uploads directory under a
hash-based name so a patch can always be traced back to its source file.
"""

import shutil
import hashlib
import logging
from pathlib import Path
from typing import Iterable, Optional
from datetime import datetime

logger = logging.getLogger(__name__)

# Default storage directory
DEFAULT_UPLOADS_DIR = 'uploads/'


class StorageService:
    """
    Framework-agnostic storage service for uploaded spreadsheets.
    """

    def __init__(self, uploads_dir: str = DEFAULT_UPLOADS_DIR):
        """
        Initialize storage service.

        Args:
            uploads_dir: Directory to keep spreadsheet copies (default: 'uploads/')
        """
        self.uploads_dir = uploads_dir
        self._ensure_directory_exists()

    def _ensure_directory_exists(self):
        Path(self.uploads_dir).mkdir(parents=True, exist_ok=True)
        logger.debug(f"Storage directory ensured: {self.uploads_dir}")

    def _stored_path(self, file_hash: str, extension: str) -> Path:
        return Path(self.uploads_dir) / f"{file_hash[:16]}{extension.lower()}"

    @staticmethod
    def compute_file_hash(file_path: str) -> str:
        """Compute the SHA256 hex digest of a file."""
        hasher = hashlib.sha256()
        with open(file_path, "rb") as f:
            for byte_block in iter(lambda: f.read(4096), b""):
                hasher.update(byte_block)

        file_hash = hasher.hexdigest()
        logger.debug(f"Computed sha256 for {file_path}: {file_hash[:16]}...")
        return file_hash

    def store_file(self, source_path: str, file_hash: str) -> str:
        """
        Copy a spreadsheet into the uploads directory.

        The copy is named after the first 16 characters of its hash, so
        storing the same content twice keeps a single copy.

        Args:
            source_path: Path to source file
            file_hash: SHA256 of the file

        Returns:
            Path to stored file
        """
        self._ensure_directory_exists()

        dest_path = self._stored_path(file_hash, Path(source_path).suffix)

        if dest_path.exists():
            logger.debug(f"File already stored: {dest_path}")
            return str(dest_path)

        shutil.copy2(source_path, dest_path)
        logger.info(f"Stored file: {source_path} -> {dest_path}")

        return str(dest_path)

    def file_exists(self, file_hash: str, extension: str = '.xlsx') -> Optional[str]:
        """
        Check if a spreadsheet with the given hash is stored.

        Returns:
            Path to file if it exists, None otherwise
        """
        file_path = self._stored_path(file_hash, extension)

        if file_path.exists():
            return str(file_path)
        return None

    def delete_file(self, file_path: str) -> bool:
        """
        Delete a file from storage.

        Returns:
            True if file was deleted, False if file didn't exist
        """
        path = Path(file_path)

        if path.exists():
            path.unlink()
            logger.info(f"Deleted file: {file_path}")
            return True

        logger.warning(f"File not found for deletion: {file_path}")
        return False

    def cleanup_temp_files(self, temp_dir: str, older_than_hours: int = 24) -> int:
        """
        Remove temporary upload files older than the given age.

        Args:
            temp_dir: Temporary directory to clean
            older_than_hours: Remove files older than this many hours

        Returns:
            Number of files deleted
        """
        temp_path = Path(temp_dir)

        if not temp_path.exists():
            return 0

        cutoff_time = datetime.now().timestamp() - (older_than_hours * 3600)
        deleted_count = 0

        for file_path in temp_path.glob("*"):
            if file_path.is_file() and file_path.stat().st_mtime < cutoff_time:
                try:
                    file_path.unlink()
                    deleted_count += 1
                    logger.debug(f"Cleaned up temp file: {file_path}")
                except OSError as e:
                    logger.error(f"Error deleting temp file {file_path}: {e}")

        if deleted_count > 0:
            logger.info(f"Cleaned up {deleted_count} temporary files")

        return deleted_count

    @staticmethod
    def validate_file_extension(file_name: str, allowed_extensions: Iterable[str]) -> bool:
        """Return True if the file's extension is in ``allowed_extensions`` (case-insensitive)."""
        ext = Path(file_name).suffix.lower()
        allowed = [e.lower() for e in allowed_extensions]
        is_valid = ext in allowed

        if not is_valid:
            logger.warning(f"Invalid file extension: '{ext}' (allowed: {allowed})")

        return is_valid

    @staticmethod
    def get_file_size_mb(file_path: str) -> float:
        """File size in megabytes, 0.0 for a missing file."""
        path = Path(file_path)

        if not path.exists():
            return 0.0

        return path.stat().st_size / (1024 * 1024)
