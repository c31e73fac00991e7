# mentorhub/services/file_service.py
from typing import Optional, Tuple
from werkzeug.utils import secure_filename
from werkzeug.datastructures import FileStorage
import os
import time
import uuid
import logging

logger = logging.getLogger(__name__)


class FileService:
    """Service class for storing uploaded files under the upload folder"""

    MAX_RETRIES = 3
    RETRY_DELAY = 0.5  # seconds

    def __init__(self, upload_folder: str, allowed_extensions: Optional[set] = None):
        self.upload_folder = upload_folder
        self.allowed_extensions = allowed_extensions

    def allowed_file(self, filename: str) -> bool:
        """Check if file extension is allowed"""
        if '.' not in filename:
            return False
        if self.allowed_extensions is None:
            return True
        return filename.rsplit('.', 1)[1].lower() in self.allowed_extensions

    @staticmethod
    def extension_of(file: FileStorage) -> str:
        filename = secure_filename(file.filename or '')
        return os.path.splitext(filename)[1].lstrip('.').lower()

    def save(self, file: FileStorage, kind: str) -> Tuple[str, str]:
        """
        Store an upload under <upload_folder>/uploads/<kind>/ with a random name.

        Args:
            file: The uploaded file
            kind: Sub-folder, e.g. 'projects' or 'reports'

        Returns:
            Tuple of (path relative to the upload folder, file extension)
        """
        filename = secure_filename(file.filename or '')
        if not filename:
            raise ValueError("No filename available")
        if not self.allowed_file(filename):
            raise ValueError(f"Unsupported file type: {os.path.splitext(filename)[1]}")

        extension = self.extension_of(file)
        relative_path = os.path.join('uploads', kind, f"{uuid.uuid4().hex}.{extension}")
        absolute_path = self.absolute_path(relative_path)
        os.makedirs(os.path.dirname(absolute_path), exist_ok=True)
        file.save(absolute_path)
        logger.info(f"Stored upload {filename} as {relative_path}")
        return relative_path, extension

    def absolute_path(self, relative_path: str) -> str:
        return os.path.join(self.upload_folder, relative_path)

    def exists(self, relative_path: Optional[str]) -> bool:
        if not relative_path:
            return False
        return os.path.isfile(self.absolute_path(relative_path))

    def delete(self, relative_path: Optional[str]) -> None:
        """
        Safely delete a stored file with retries for Windows systems.

        Args:
            relative_path: Path relative to the upload folder
        """
        if not relative_path:
            return
        filepath = self.absolute_path(relative_path)
        for attempt in range(self.MAX_RETRIES):
            try:
                if os.path.exists(filepath):
                    os.unlink(filepath)
                break
            except PermissionError:
                if attempt < self.MAX_RETRIES - 1:
                    time.sleep(self.RETRY_DELAY)
                    continue
                logger.warning(f"Could not delete file {filepath} after {self.MAX_RETRIES} attempts")


def get_file_service(allowed_extensions: Optional[set] = None) -> FileService:
    """File service bound to the current app's upload folder"""
    from flask import current_app
    return FileService(current_app.config['UPLOAD_FOLDER'], allowed_extensions)
