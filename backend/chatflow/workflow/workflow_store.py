"""
Workflow Store - JSON-file persistence for chatbot workflows.

Stores each workflow record as an individual JSON file under a
configurable directory. Writes go through a temp file and an atomic
rename, and a process-wide lock serialises access from worker threads.

Every save bumps the record's ``version``. With optimistic locking
(``StoreConfig.optimistic_locking`` or an explicit
``expected_version``) a save whose version does not match the stored
one raises ``WorkflowConflict``; otherwise the last writer wins.
"""

from __future__ import annotations

import json
import os
import threading
from logging import getLogger
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from chatflow.config import StoreConfig, get_config
from chatflow.workflow.errors import PersistenceFailure, WorkflowConflict
from chatflow.workflow.workflow_model import WorkflowRecord

logger = getLogger(__name__)


class WorkflowStore:
    """Persist and load WorkflowRecord objects as JSON files."""

    def __init__(
        self,
        storage_dir: Optional[Path] = None,
        optimistic_locking: Optional[bool] = None,
    ) -> None:
        cfg = get_config(StoreConfig)
        self._dir = Path(storage_dir or cfg.storage_dir)
        self._dir.mkdir(parents=True, exist_ok=True)
        self._optimistic = (
            cfg.optimistic_locking if optimistic_locking is None else optimistic_locking
        )
        self._lock = threading.Lock()
        logger.info(f"WorkflowStore initialized at {self._dir}")

    @property
    def storage_dir(self) -> Path:
        return self._dir

    # ── CRUD ──

    def save(
        self,
        record: WorkflowRecord,
        expected_version: Optional[int] = None,
    ) -> WorkflowRecord:
        """Save (create or update) a workflow record.

        Returns the stored copy with its new ``version``; ``record``
        itself is only updated once the write succeeded.

        Raises:
            WorkflowConflict: the stored version is not the expected one.
            PersistenceFailure: the graph is invalid or the write failed.
        """
        errors = record.to_graph().validate_invariants()
        if errors:
            raise PersistenceFailure(
                record.id, "refusing to save an invalid graph: " + "; ".join(errors[:5]),
            )

        with self._lock:
            current = self._read_version(record.id)
            if expected_version is not None or self._optimistic:
                expected = record.version if expected_version is None else expected_version
                if current != expected:
                    logger.warning(
                        f"Save conflict on {record.id}: expected v{expected}, stored v{current}"
                    )
                    raise WorkflowConflict(record.id, expected, current)

            stored = record.model_copy(deep=True)
            stored.version = current + 1
            stored.touch()
            self._write(stored)

        record.version = stored.version
        record.updated_at = stored.updated_at
        logger.info(f"Workflow saved: {stored.name} ({stored.id}) v{stored.version}")
        return stored

    def load(self, workflow_id: str) -> Optional[WorkflowRecord]:
        """Load a single workflow by ID (``None`` if it does not exist).

        Raises:
            PersistenceFailure: the file exists but cannot be read.
        """
        path = self._path_for(workflow_id)
        with self._lock:
            if not path.exists():
                return None
            try:
                data = json.loads(path.read_text(encoding="utf-8"))
                return WorkflowRecord.model_validate(data)
            except (OSError, json.JSONDecodeError, ValidationError) as e:
                logger.error(f"Failed to load workflow {workflow_id}: {e}")
                raise PersistenceFailure(workflow_id, f"unreadable workflow file ({e})") from e

    def delete(self, workflow_id: str) -> bool:
        """Delete a workflow record."""
        path = self._path_for(workflow_id)
        with self._lock:
            if path.exists():
                path.unlink()
                logger.info(f"Workflow deleted: {workflow_id}")
                return True
        return False

    def set_active(self, workflow_id: str, is_active: bool) -> WorkflowRecord:
        """Switch a workflow on or off without touching its graph."""
        record = self.load(workflow_id)
        if record is None:
            raise PersistenceFailure(workflow_id, "workflow not found")
        record.is_active = is_active
        return self.save(record)

    def list_all(self) -> List[WorkflowRecord]:
        """List all saved workflow records."""
        records: List[WorkflowRecord] = []
        for path in sorted(self._dir.glob("*.json")):
            try:
                data = json.loads(path.read_text(encoding="utf-8"))
                records.append(WorkflowRecord.model_validate(data))
            except (OSError, json.JSONDecodeError, ValidationError) as e:
                logger.warning(f"Skipping malformed workflow file {path.name}: {e}")
        return records

    def list_templates(self) -> List[WorkflowRecord]:
        """List only template workflows."""
        return [w for w in self.list_all() if w.is_template]

    def list_user_workflows(self) -> List[WorkflowRecord]:
        """List only user-created (non-template) workflows."""
        return [w for w in self.list_all() if not w.is_template]

    def exists(self, workflow_id: str) -> bool:
        return self._path_for(workflow_id).exists()

    # ── Internals ──

    def _path_for(self, workflow_id: str) -> Path:
        # Sanitize ID for filesystem
        safe_id = "".join(c for c in workflow_id if c.isalnum() or c in "-_")
        if not safe_id:
            raise PersistenceFailure(workflow_id, "workflow id has no usable characters")
        return self._dir / f"{safe_id}.json"

    def _read_version(self, workflow_id: str) -> int:
        path = self._path_for(workflow_id)
        if not path.exists():
            return 0
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise PersistenceFailure(workflow_id, f"unreadable workflow file ({e})") from e
        return int(data.get("version", 0))

    def _write(self, record: WorkflowRecord) -> None:
        path = self._path_for(record.id)
        tmp = path.with_suffix(".json.tmp")
        try:
            tmp.write_text(
                record.model_dump_json(indent=2, by_alias=True),
                encoding="utf-8",
            )
            os.replace(tmp, path)
        except OSError as e:
            logger.error(f"Failed to write workflow {record.id}: {e}")
            tmp.unlink(missing_ok=True)
            raise PersistenceFailure(record.id, f"write failed ({e})") from e


# ── Singleton ──

_store_instance: Optional[WorkflowStore] = None


def get_workflow_store() -> WorkflowStore:
    """Return the global WorkflowStore singleton."""
    global _store_instance
    if _store_instance is None:
        _store_instance = WorkflowStore()
    return _store_instance
