# src/pluginshell/core/managers/temp_folder_manager.py
import logging
import shutil
import tempfile
import threading
import uuid
from pathlib import Path
from typing import List, Optional, Union

logger = logging.getLogger(__name__)


class TempFolder:
    """A uniquely named directory that is deleted, with its content, on release."""

    def __init__(self, root: Union[str, Path]):
        root_dir = Path(root)
        root_dir.mkdir(parents=True, exist_ok=True)
        self.path = Path(tempfile.mkdtemp(dir=str(root_dir)))
        self.released = False
        logger.debug("Temporary folder created: %s", self.path)

    @property
    def name(self) -> str:
        return self.path.name

    def combine(self, file_name: str) -> Path:
        return self.path / file_name

    def random_file_path(self, suffix: str = "") -> Path:
        """Returns a path inside the folder that does not exist yet."""
        while True:
            candidate = self.combine(f"{uuid.uuid4().hex[:12]}{suffix}")
            if not candidate.exists():
                return candidate

    def release(self) -> None:
        if self.released:
            return
        shutil.rmtree(self.path, ignore_errors=True)
        self.released = True
        logger.debug("Temporary folder deleted: %s", self.path)

    def __enter__(self) -> "TempFolder":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    def __repr__(self) -> str:
        return f"<TempFolder path={self.path} released={self.released}>"


class TempFolderManager:
    """
    Hands out temporary working folders to commands and removes whatever is
    still outstanding when the shell closes.
    """

    def __init__(self, root: Optional[Union[str, Path]] = None):
        self.root = Path(root) if root else Path(tempfile.gettempdir())
        self._folders: List[TempFolder] = []
        self._lock = threading.Lock()

    def create(self) -> TempFolder:
        folder = TempFolder(self.root)
        with self._lock:
            self._folders.append(folder)
        return folder

    @property
    def outstanding(self) -> List[TempFolder]:
        with self._lock:
            return [f for f in self._folders if not f.released]

    def release_all(self) -> int:
        """Deletes every folder handed out so far. Returns how many were still present."""
        with self._lock:
            folders, self._folders = self._folders, []
        count = 0
        for folder in folders:
            if not folder.released:
                folder.release()
                count += 1
        if count:
            logger.debug("Released %d temporary folder(s) under %s", count, self.root)
        return count
