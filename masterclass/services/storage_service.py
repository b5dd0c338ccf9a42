"""Low-level JSON file I/O operations with locking."""
import json
import logging
import os
import sys
import tempfile
import time
from contextlib import contextmanager
from typing import Any, Callable

from masterclass.utils.exceptions import StorageError

if sys.platform != "win32":
    import fcntl

logger = logging.getLogger(__name__)


def load_json(file_path: str, retry_count: int = 3, retry_delay: float = 0.1) -> Any:
    """
    Load and parse JSON file with UTF-8 encoding.

    Args:
        file_path: Path to JSON file
        retry_count: Number of retry attempts for permission errors (default: 3)
        retry_delay: Delay in seconds between retries (default: 0.1)

    Returns:
        Parsed JSON content (object or array)

    Raises:
        FileNotFoundError: If file doesn't exist
        json.JSONDecodeError: If JSON is malformed
        PermissionError: If file not readable after retries
    """
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"File not found: {file_path}")

    for attempt in range(retry_count):
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                return json.load(f)
        except PermissionError:
            if attempt < retry_count - 1:
                time.sleep(retry_delay)
                continue
        except json.JSONDecodeError as e:
            raise json.JSONDecodeError(
                f"Malformed JSON in {file_path}: {e.msg}",
                e.doc,
                e.pos
            )

    raise PermissionError(f"Cannot read file after {retry_count} attempts: {file_path}")


def save_json(file_path: str, data: Any) -> None:
    """
    Save data to JSON file atomically with UTF-8 encoding.

    Args:
        file_path: Path to JSON file
        data: JSON-serializable object or array

    Raises:
        StorageError: If the write or the final rename fails
    """
    dir_path = os.path.dirname(file_path)
    if dir_path and not os.path.exists(dir_path):
        os.makedirs(dir_path, exist_ok=True)

    temp_fd, temp_path = tempfile.mkstemp(
        dir=dir_path if dir_path else ".",
        prefix=".tmp_",
        suffix=".json"
    )

    try:
        with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
            f.flush()
            os.fsync(f.fileno())
        os.replace(temp_path, file_path)
    except (OSError, TypeError, ValueError) as e:
        if os.path.exists(temp_path):
            os.remove(temp_path)
        raise StorageError(f"Failed to write file {file_path}: {e}") from e


@contextmanager
def lock_file(file_path: str, timeout: float = 5.0):
    """
    Context manager for file locking with retry mechanism.

    Args:
        file_path: Path to file to lock
        timeout: Maximum seconds to wait for lock acquisition (default: 5.0)

    Usage:
        with lock_file('data/views.json'):
            # Critical section - file is locked
            views = load_json('data/views.json')
            views[token] = record
            save_json('data/views.json', views)

    Raises:
        TimeoutError: If unable to acquire lock within timeout
        FileNotFoundError: If file doesn't exist
    """
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"Cannot lock non-existent file: {file_path}")

    if sys.platform == "win32":
        lock_file_path = f"{file_path}.lock"
        start_time = time.time()

        while True:
            try:
                lock_fd = os.open(lock_file_path, os.O_CREAT | os.O_EXCL | os.O_RDWR)
                break
            except FileExistsError:
                if time.time() - start_time > timeout:
                    raise TimeoutError(f"Could not acquire lock on {file_path} within {timeout}s")
                time.sleep(0.05)

        try:
            yield
        finally:
            os.close(lock_fd)
            os.remove(lock_file_path)
    else:
        # Saves replace the data file, so lock a sidecar that is never renamed
        lock_handle = open(f"{file_path}.lock", "a")
        try:
            start_time = time.time()
            while True:
                try:
                    fcntl.flock(lock_handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
                    break
                except OSError:
                    if time.time() - start_time > timeout:
                        raise TimeoutError(f"Could not acquire lock on {file_path} within {timeout}s")
                    time.sleep(0.05)

            yield

        finally:
            fcntl.flock(lock_handle.fileno(), fcntl.LOCK_UN)
            lock_handle.close()


class JsonFileStore:
    """
    A single JSON document on disk, read and written as a whole.

    The default factory supplies the empty value ([] or {}) used when the
    file is missing or unreadable. Unreadable content is logged and then
    overwritten by the next write.
    """

    def __init__(self, file_path: str, default_factory: Callable[[], Any]):
        self.file_path = file_path
        self.default_factory = default_factory

    def ensure_exists(self) -> None:
        """Create the file with its empty value if it is missing."""
        if os.path.exists(self.file_path):
            return

        dir_path = os.path.dirname(self.file_path)
        if dir_path:
            os.makedirs(dir_path, exist_ok=True)

        # O_EXCL so a concurrent creator never clobbers data already written
        try:
            fd = os.open(self.file_path, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
        except FileExistsError:
            return
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(self.default_factory(), f)

    def read(self) -> Any:
        try:
            return load_json(self.file_path)
        except FileNotFoundError:
            return self.default_factory()
        except (json.JSONDecodeError, PermissionError) as e:
            logger.warning(f"Unreadable store {self.file_path}, treating as empty: {e}")
            return self.default_factory()

    def write(self, data: Any) -> None:
        save_json(self.file_path, data)

    def update(self, mutate: Callable[[Any], Any]) -> Any:
        """
        Apply a read-modify-write under an exclusive lock.

        Args:
            mutate: Receives the current value and returns the value to save

        Returns:
            The saved value
        """
        self.ensure_exists()
        with lock_file(self.file_path):
            data = mutate(self.read())
            self.write(data)
            return data
