from pathlib import Path
from datetime import datetime

from .log_storage_strategy import LogStorageStrategy


class LocalFileStrategy(LogStorageStrategy):
    """
    Appends layout log entries to a text file, one ``[time] [PRIORITY] message`` per line.

    Opening a file that already exists starts a new session in it: previous
    content is discarded.
    """

    def __init__(self, file_location):
        """
        Args:
            file_location (str | Path): Log file; relative paths resolve against the cwd.
        """
        self.path = Path(file_location).expanduser().resolve()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._write_header("SESSION STARTED")

    @property
    def file_location(self) -> str:
        return str(self.path)

    def _write_header(self, label):
        self.path.write_text(f"{label}: {datetime.now().isoformat(timespec='seconds')}\n")

    def store_log(self, message, priority, timestamp):
        with self.path.open('a') as log_file:
            log_file.write(f"[{timestamp}] [{priority}] {message}\n")

    def flush_logs(self):
        self._write_header("FLUSHED")
