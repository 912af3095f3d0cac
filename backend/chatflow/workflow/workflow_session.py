"""
Workflow Session - one authoring session over one stored workflow.

The session owns the in-memory ``WorkflowGraph`` and its
``CommandBus``. Edits are synchronous; the only suspension point is
``save()``, which hands the ``{nodes, edges, entryNodeId}`` triple to
the store on a worker thread. A failed save leaves the graph and the
unsaved-changes flag exactly as they were so the author can retry.
"""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import Any, Dict, Optional, Union

from chatflow.workflow.commands import CommandBus
from chatflow.workflow.errors import PersistenceFailure, WorkflowConflict
from chatflow.workflow.workflow_inspector import inspect_workflow
from chatflow.workflow.workflow_layout import apply_layout
from chatflow.workflow.workflow_model import WorkflowGraph, WorkflowRecord
from chatflow.workflow.workflow_store import WorkflowStore
from chatflow.workflow.workflow_transfer import (
    ImportResult,
    export_workflow,
    import_workflow,
)

logger = getLogger(__name__)


class WorkflowSession:
    """Edit a workflow in memory and save it back as a whole."""

    def __init__(self, store: WorkflowStore, record: WorkflowRecord) -> None:
        self._store = store
        self._record = record
        self._graph = record.to_graph()
        self._commands = CommandBus(self._graph)
        self._saved_revision = self._graph.revision
        self._meta_dirty = False

    # ── Construction ──

    @classmethod
    async def open(cls, store: WorkflowStore, workflow_id: str) -> "WorkflowSession":
        """Load ``workflow_id`` from ``store``.

        Raises:
            PersistenceFailure: the workflow is missing or unreadable.
        """
        record = await asyncio.to_thread(store.load, workflow_id)
        if record is None:
            raise PersistenceFailure(workflow_id, "workflow not found")
        logger.info(f"Session opened: {record.name} ({record.id}) v{record.version}")
        return cls(store, record)

    @classmethod
    def new(cls, store: WorkflowStore, name: str = "Untitled Workflow") -> "WorkflowSession":
        """Start a session over a workflow that has not been saved yet."""
        return cls(store, WorkflowRecord(name=name))

    # ── State ──

    @property
    def workflow_id(self) -> str:
        return self._record.id

    @property
    def name(self) -> str:
        return self._record.name

    @name.setter
    def name(self, value: str) -> None:
        if value != self._record.name:
            self._record.name = value
            self._meta_dirty = True

    @property
    def is_active(self) -> bool:
        return self._record.is_active

    @property
    def version(self) -> int:
        return self._record.version

    @property
    def graph(self) -> WorkflowGraph:
        return self._graph

    @property
    def commands(self) -> CommandBus:
        return self._commands

    @property
    def dirty(self) -> bool:
        """True while there are edits that have not been saved."""
        return self._meta_dirty or self._graph.revision != self._saved_revision

    # ── Persistence ──

    async def save(self) -> WorkflowRecord:
        """Persist the whole graph.

        Raises:
            WorkflowConflict: someone else saved this workflow first.
            PersistenceFailure: the store could not write the workflow.
        """
        revision = self._graph.revision
        outgoing = self._record.model_copy(deep=True)
        outgoing.apply_definition(self._graph.definition())

        try:
            stored = await asyncio.to_thread(self._store.save, outgoing)
        except WorkflowConflict:
            logger.error(f"Save of {self.workflow_id} lost to a concurrent edit")
            raise
        except PersistenceFailure as exc:
            logger.error(f"Save of {self.workflow_id} failed: {exc}")
            raise
        except OSError as exc:
            logger.error(f"Save of {self.workflow_id} failed: {exc}")
            raise PersistenceFailure(self.workflow_id, str(exc)) from exc

        self._record = stored
        # Edits made while the write was in flight stay unsaved.
        self._saved_revision = revision
        self._meta_dirty = False
        logger.info(f"Session saved: {self.name} ({self.workflow_id}) v{stored.version}")
        return stored

    # ── Interchange ──

    def export(self) -> Dict[str, Any]:
        return export_workflow(self._graph, self.workflow_id, self.name)

    def import_(
        self,
        payload: Union[str, bytes, Dict[str, Any]],
        merge: bool = False,
    ) -> ImportResult:
        """Import an exported workflow into this session's graph."""
        return import_workflow(self._graph, payload, merge=merge)

    # ── Tools ──

    def auto_layout(self, direction: Optional[str] = None) -> Dict[str, Dict[str, float]]:
        return apply_layout(self._graph, direction=direction)

    def inspect(self) -> Dict[str, Any]:
        report = inspect_workflow(self._graph)
        report["summary"]["workflow_id"] = self.workflow_id
        report["summary"]["workflow_name"] = self.name
        return report
