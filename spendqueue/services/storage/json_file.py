"""
JSON File Storage Implementation

DESIGN DECISION: The whole state lives in one JSON document because:
1. The operator can read and hand-fix it
2. No database setup required
3. Every command reads and writes it exactly once

TRADEOFFS:
- No locking: concurrent invocations race and the later writer wins
- Whole-document rewrite on every change (fine at personal scale)

Writes go to a temporary file in the same directory and are then
renamed over the target, so an interrupted write never truncates the
previous state.

Loading is versioned: the current schema first, then each legacy schema.
A legacy document is upgraded and written back once, before the command
continues.
"""

import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from pydantic import ValidationError

from spendqueue.audit import AuditLogger
from spendqueue.models.audit import AuditEventBuilder
from spendqueue.models.money import local_now
from spendqueue.models.queue import State
from spendqueue.services.storage.interface import (
    CorruptStateError,
    StateStorageInterface,
    StorageError,
)
from spendqueue.services.storage.legacy import decode_legacy


class JsonFileStateStorage(StateStorageInterface):
    """
    State stored as a pretty-printed JSON document at `path`.

    The parent directory is created on first use.
    """

    def __init__(
        self,
        path: Path,
        clock: Callable[[], datetime] = local_now,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._path = Path(path)
        self._clock = clock
        self._audit_logger = audit_logger
        self._migrated = False
        self.created_default = False

    @property
    def path(self) -> Path:
        return self._path

    @property
    def location(self) -> str:
        return str(self._path)

    @property
    def migrated(self) -> bool:
        """True once a legacy document has been upgraded and rewritten."""
        return self._migrated

    def _ensure_directory(self) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Can't create config dir {self._path.parent}: {e}")

    def load(self) -> State:
        """Load the state, falling back to the default state on first run."""
        if not self._path.exists():
            self._ensure_directory()
            self.created_default = True
            if self._audit_logger:
                self._audit_logger.log(AuditEventBuilder.state_created(self.location))
            return State.default(self._clock())

        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Can't read state file {self._path}: {e}")

        return self.decode(raw)

    def decode(self, raw: str) -> State:
        """
        Decode a document under the current schema, else a legacy one.

        Raises:
            CorruptStateError: Nothing decodes it.
        """
        try:
            return State.model_validate_json(raw)
        except ValidationError as current_error:
            error = current_error

        if not self._migrated:
            upgraded = decode_legacy(raw)
            if upgraded is not None:
                schema_name, state = upgraded
                self._migrated = True
                self.save(state)
                if self._audit_logger:
                    self._audit_logger.log(
                        AuditEventBuilder.state_migrated(self.location, schema_name)
                    )
                return state

        raise CorruptStateError(
            f"Can't parse state file {self._path}, check the formatting: "
            f"{error.error_count()} error(s), first: {_first_error(error)}"
        )

    def save(self, state: State) -> None:
        """Atomically replace the state file with `state`."""
        self._ensure_directory()
        document = state.model_dump_json(indent=2)

        tmp_path = None
        try:
            fd, tmp_path = tempfile.mkstemp(
                dir=str(self._path.parent),
                prefix=f".{self._path.name}.",
                suffix=".tmp",
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(document)
                f.write("\n")
                f.flush()
                os.fsync(f.fileno())
            # os.replace is atomic on the same filesystem
            os.replace(tmp_path, self._path)
        except OSError as e:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise StorageError(f"Can't write state file {self._path}: {e}")


class InMemoryStateStorage(StateStorageInterface):
    """
    Keeps the state in memory, as a JSON document.

    Storing the serialized form means every load returns a fresh copy,
    exactly like reading the file again.
    """

    def __init__(self, state: Optional[State] = None, clock: Callable[[], datetime] = local_now):
        self._clock = clock
        self._document: Optional[str] = (
            state.model_dump_json() if state is not None else None
        )
        self.save_count = 0

    @property
    def location(self) -> str:
        return "<memory>"

    def load(self) -> State:
        if self._document is None:
            return State.default(self._clock())
        try:
            return State.model_validate_json(self._document)
        except ValidationError as e:
            raise CorruptStateError(f"Can't parse in-memory state: {_first_error(e)}")

    def save(self, state: State) -> None:
        self._document = state.model_dump_json()
        self.save_count += 1

    @property
    def stored(self) -> Optional[State]:
        """The last saved state without counting as a command load."""
        if self._document is None:
            return None
        return State.model_validate_json(self._document)


def _first_error(error: ValidationError) -> str:
    first = error.errors()[0]
    where = ".".join(str(part) for part in first.get("loc", ())) or "document"
    return f"{where}: {first.get('msg', 'invalid')}"
