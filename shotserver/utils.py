import os
import enum
import logging
from collections import namedtuple

logger = logging.getLogger(__name__)


class FileStatus(enum.Enum):
    OK = "ok"
    MISSING = "missing"
    UNREADABLE = "unreadable"


FileResult = namedtuple("FileResult", ["status", "data"])


class MimeTypes:
    TABLE = {
        ".png": "image/png",
        ".jpg": "image/jpeg",
        ".jpeg": "image/jpeg",
        ".gif": "image/gif",
        ".bmp": "image/bmp",
    }
    DEFAULT = "application/octet-stream"

    @staticmethod
    def guess(path):
        ext = os.path.splitext(os.fspath(path))[1].lower()
        return MimeTypes.TABLE.get(ext, MimeTypes.DEFAULT)


class Screenshots:
    @staticmethod
    def latest(directory):
        """Return the newest regular file directly inside ``directory``.

        Equal modification times are broken by the lexicographically
        greatest file name. Returns None when the directory is missing,
        holds no regular files, or cannot be scanned.
        """
        try:
            if not os.path.isdir(directory):
                return None

            latest_key = None
            latest_path = None
            with os.scandir(directory) as entries:
                for entry in entries:
                    if not entry.is_file():
                        continue
                    key = (entry.stat().st_mtime_ns, entry.name)
                    if latest_key is None or key > latest_key:
                        latest_key = key
                        latest_path = entry.path
            return latest_path
        except OSError as e:
            logger.error(f"Error scanning screenshots: {e}")
            return None


class FileLoader:
    @staticmethod
    def read(path):
        if path is None or not os.path.exists(path):
            return FileResult(FileStatus.MISSING, b"")

        try:
            with open(path, "rb") as f:
                return FileResult(FileStatus.OK, f.read())
        except OSError:
            return FileResult(FileStatus.UNREADABLE, b"")
