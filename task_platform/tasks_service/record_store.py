"""
Append-only task log backed by a single delimiter-framed text file.

File format::

    serialize(r1) + DELIMITER + serialize(r2) + DELIMITER + ... + serialize(rn) + DELIMITER

Each record is compact JSON. The delimiter is a plain literal with no
framing escape of its own, so the serializer rewrites any occurrence of it
inside a JSON string as a unicode escape (``\\u0054ASK_SPLIT``). JSON
decoding turns the escape back into the original text.
"""
import json
import logging
import os
import re
import threading
from pathlib import Path
from typing import List, Union

from pydantic import ValidationError

from .errors import StoreCorruptionError, StoreReadError, StoreWriteError
from .schemas import TaskRecord

logger = logging.getLogger(__name__)

DELIMITER = "TASK_SPLIT"

# Only string values can contain the delimiter; the record keys never do.
_DELIMITER_PATTERN = re.compile(re.escape(DELIMITER[0]) + "(?=" + re.escape(DELIMITER[1:]) + ")")
_DELIMITER_ESCAPE = "\\u%04x" % ord(DELIMITER[0])


def serialize(record: TaskRecord) -> str:
    raw = json.dumps(record.model_dump(), ensure_ascii=False, separators=(",", ":"))
    return _DELIMITER_PATTERN.sub(lambda _: _DELIMITER_ESCAPE, raw)


def deserialize(chunk: str) -> TaskRecord:
    return TaskRecord.model_validate_json(chunk)


class RecordStore:
    """
    Owns the task log file and the lock guarding it.

    `append` and `read_all` both hold the lock, so a reader sees the file
    either before or after an append and appends never interleave.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._lock = threading.Lock()

    def append(self, record: TaskRecord) -> TaskRecord:
        """
        Append one record to the end of the log.

        Creates the file on first use. The parent directory must exist.

        Raises:
            StoreWriteError: If the file cannot be opened or written
        """
        frame = serialize(record) + DELIMITER
        with self._lock:
            try:
                with open(self.path, "a", encoding="utf-8") as handle:
                    handle.write(frame)
                    handle.flush()
                    os.fsync(handle.fileno())
            except OSError as e:
                logger.error("Failed to append task to %s: %s", self.path, e)
                raise StoreWriteError(f"Could not append to task store {self.path.name}: {e.strerror or e}") from e

        logger.debug("Appended task to %s (%d chars)", self.path, len(frame))
        return record

    def read_all(self) -> List[TaskRecord]:
        """
        Read every record in insertion order.

        Returns an empty list when the file does not exist yet.

        Raises:
            StoreReadError: If the file exists but cannot be read
            StoreCorruptionError: On the first chunk that fails to decode
        """
        with self._lock:
            try:
                with open(self.path, "r", encoding="utf-8") as handle:
                    data = handle.read()
            except FileNotFoundError:
                return []
            except (OSError, UnicodeDecodeError) as e:
                logger.error("Failed to read task store %s: %s", self.path, e)
                raise StoreReadError(f"Could not read task store {self.path.name}: {e}") from e

        return self._parse(data)

    @staticmethod
    def _parse(data: str) -> List[TaskRecord]:
        chunks = data.split(DELIMITER)
        # Drop the dangling split artifact(s) after the final delimiter.
        while chunks and not chunks[-1].strip():
            chunks.pop()

        records = []
        offset = 0
        for index, chunk in enumerate(chunks):
            try:
                records.append(deserialize(chunk))
            except ValidationError as e:
                logger.error("Corrupt chunk %d at offset %d in task store", index, offset)
                raise StoreCorruptionError(index, offset, reason=f"{e.error_count()} validation error(s)") from e
            offset += len(chunk) + len(DELIMITER)
        return records
