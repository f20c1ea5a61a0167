"""
Local directory used as transient storage for export documents.
"""

import logging
from pathlib import Path

from ..core.collaborators import TransientStorage


logger = logging.getLogger(__name__)


class LocalTransientStorage(TransientStorage):
    """
    Writes export documents into a local directory.

    Files only live for the duration of one deposit attempt.
    """

    def __init__(self, base_dir: Path, create_dirs: bool = True):
        """
        Initialize the storage.

        Args:
            base_dir: Directory for transient files
            create_dirs: Whether to create the directory automatically
        """
        self.base_dir = Path(base_dir)
        self.create_dirs = create_dirs

        if create_dirs:
            self.base_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, file_name: str) -> str:
        return str(self.base_dir / file_name)

    def write(self, path: str, data: bytes) -> None:
        file_path = Path(path)
        if self.create_dirs:
            file_path.parent.mkdir(parents=True, exist_ok=True)

        with open(file_path, "wb") as f:
            f.write(data)

        logger.debug(f"Wrote {len(data)} bytes to: {file_path}")

    def delete(self, path: str) -> None:
        file_path = Path(path)
        if file_path.exists():
            file_path.unlink()
            logger.debug(f"Removed transient file: {file_path}")
