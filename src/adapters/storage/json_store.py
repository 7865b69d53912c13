"""JSON file-based record store — implements RecordStorePort."""

import json
import os
import sys
import tempfile
from pathlib import Path
from typing import List

from src.domain.errors import PersistenceFailed
from src.domain.models import MessageRecord, records_to_json


def _log(msg: str):
    print(msg, file=sys.stderr)


class JsonRecordStore:
    """Whole-collection store backed by a single JSON array file.

    Every call re-reads or re-writes the full file; nothing is cached
    between calls.
    """

    def __init__(self, path: str = "messages.json"):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load_all(self) -> List[MessageRecord]:
        """Return every stored record.

        A missing file or one that is not a JSON array reads as no history.
        Entries that cannot be decoded are skipped, the rest are kept.
        """
        if not self._path.exists():
            return []
        try:
            text = self._path.read_text(encoding="utf-8")
        except OSError as e:
            _log(f"Failed to read message store {self._path}: {e}")
            raise PersistenceFailed("Failed to load messages") from e
        try:
            raw = json.loads(text)
        except ValueError as e:
            _log(f"Message store {self._path} is not valid JSON, treating as empty: {e}")
            return []
        if not isinstance(raw, list):
            _log(f"Message store {self._path} is not a JSON array, treating as empty")
            return []

        records = []
        for position, item in enumerate(raw):
            try:
                records.append(MessageRecord.from_dict(item))
            except (KeyError, ValueError, TypeError, AttributeError) as e:
                _log(f"Skipping malformed record #{position} in {self._path}: {e!r}")
        return records

    def save_all(self, records: List[MessageRecord]) -> None:
        content = json.dumps(records_to_json(records), ensure_ascii=False, indent=2)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            # Atomic write
            fd, tmp_path = tempfile.mkstemp(
                dir=str(self._path.parent), suffix=".tmp",
            )
        except OSError as e:
            _log(f"Failed to save message store {self._path}: {e}")
            raise PersistenceFailed("Failed to save messages") from e
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
            os.replace(tmp_path, str(self._path))
        except BaseException as e:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            if isinstance(e, OSError):
                _log(f"Failed to save message store {self._path}: {e}")
                raise PersistenceFailed("Failed to save messages") from e
            raise
