"""Reconciliation state machine.

Drives one full cycle of scan -> build -> diff -> decide -> write::

    IDLE -> SCANNING -> BUILT -> DIFFING -> AWAITING_DECISION
    AWAITING_DECISION --WRITE--> WRITING -> VERIFIED | VERIFICATION_FAILED
                                            | WRITE_FAILED -> DONE
    AWAITING_DECISION --RESCAN--> SCANNING
    AWAITING_DECISION --QUIT--> DONE
    AWAITING_DECISION --VIEW/REMOVALS/DETAILS--> AWAITING_DECISION
    DIFFING -> DONE  (proposed manifest already equals the persisted one)

Decisions come from a CommandSource; presentation is delegated to a
ReconcileListener. The persisted manifest is read once per session and
threaded through the stages as part of a ReconcileSession value.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path

from isosync.core.config import IsosyncConfig
from isosync.core.diff import DiffResult, RemovalEntry, classify_removals, compute_diff
from isosync.core.manifest import build_manifest, manifest_path, read_manifest_text
from isosync.core.scanner import IsoScanner
from isosync.core.writer import WriteResult, WriteStatus, write_manifest
from isosync.models.manifest import Manifest
from isosync.models.scan_result import ScanResult

logger = logging.getLogger(__name__)


class ReconcileState(str, Enum):
    """States of the reconciliation cycle."""

    IDLE = "idle"
    SCANNING = "scanning"
    BUILT = "built"
    DIFFING = "diffing"
    AWAITING_DECISION = "awaiting_decision"
    WRITING = "writing"
    VERIFIED = "verified"
    VERIFICATION_FAILED = "verification_failed"
    WRITE_FAILED = "write_failed"
    DONE = "done"


class Command(str, Enum):
    """Decisions available while awaiting a decision.

    Attributes:
        WRITE: Persist the proposed manifest.
        VIEW: Show the full proposed manifest.
        RESCAN: Scan the disk again and re-run the dry run.
        REMOVALS: Preview lines pending removal.
        DETAILS: Show scan details.
        QUIT: Stop without writing.
    """

    WRITE = "write"
    VIEW = "view"
    RESCAN = "rescan"
    REMOVALS = "removals"
    DETAILS = "details"
    QUIT = "quit"

    @property
    def is_read_only(self) -> bool:
        """Check if the command returns straight to AWAITING_DECISION."""
        return self in (Command.VIEW, Command.REMOVALS, Command.DETAILS)


_TRANSITIONS: dict[ReconcileState, frozenset[ReconcileState]] = {
    ReconcileState.IDLE: frozenset({ReconcileState.SCANNING}),
    ReconcileState.SCANNING: frozenset({ReconcileState.BUILT}),
    ReconcileState.BUILT: frozenset({ReconcileState.DIFFING}),
    ReconcileState.DIFFING: frozenset({ReconcileState.AWAITING_DECISION, ReconcileState.DONE}),
    ReconcileState.AWAITING_DECISION: frozenset(
        {
            ReconcileState.AWAITING_DECISION,
            ReconcileState.SCANNING,
            ReconcileState.WRITING,
            ReconcileState.DONE,
        }
    ),
    ReconcileState.WRITING: frozenset(
        {
            ReconcileState.VERIFIED,
            ReconcileState.VERIFICATION_FAILED,
            ReconcileState.WRITE_FAILED,
        }
    ),
    ReconcileState.VERIFIED: frozenset({ReconcileState.DONE}),
    ReconcileState.VERIFICATION_FAILED: frozenset({ReconcileState.DONE}),
    ReconcileState.WRITE_FAILED: frozenset({ReconcileState.DONE}),
    ReconcileState.DONE: frozenset(),
}


class ReconcileStateError(Exception):
    """Raised on a transition the state machine does not allow."""


@dataclass(frozen=True, slots=True)
class ReconcileSession:
    """Values threaded through one reconciliation cycle.

    Attributes:
        root: Scanned root directory.
        manifest_path: Persisted manifest location.
        current_text: Persisted manifest text, read once per session.
        scan_result: Latest scan output.
        manifest: Manifest built from the latest scan.
        diff: Diff between current_text and the proposed text.
    """

    root: Path
    manifest_path: Path
    current_text: str
    scan_result: ScanResult | None = None
    manifest: Manifest | None = None
    diff: DiffResult | None = None

    @property
    def proposed_text(self) -> str:
        """Serialized proposed manifest."""
        return self.manifest.to_text() if self.manifest is not None else ""

    @property
    def in_sync(self) -> bool:
        """Check if the persisted manifest already equals the proposed one."""
        return self.manifest is not None and self.current_text == self.proposed_text


@dataclass(frozen=True, slots=True)
class ReconcileOutcome:
    """Final result of a reconciliation run.

    Attributes:
        state: Last state before DONE (VERIFIED, VERIFICATION_FAILED,
            WRITE_FAILED, AWAITING_DECISION for quit, DIFFING for in-sync).
        session: Session at the end of the run.
        write_result: Result of the write, if one happened.
        in_sync: True if no write was needed.
    """

    state: ReconcileState
    session: ReconcileSession
    write_result: WriteResult | None = None
    in_sync: bool = False

    @property
    def written(self) -> bool:
        """Check if a verified write happened."""
        return self.write_result is not None and self.write_result.success

    @property
    def failed(self) -> bool:
        """Check if a write was attempted and failed."""
        return self.write_result is not None and self.write_result.failed


class CommandSource(ABC):
    """Supplies one decision each time the machine awaits a decision."""

    @abstractmethod
    def next_command(self, session: ReconcileSession) -> Command:
        """Return the next decision for the given session."""


class ScriptedCommands(CommandSource):
    """Command source replaying a fixed sequence of decisions.

    Once the script is exhausted every further request yields QUIT.

    Example:
        >>> commands = ScriptedCommands([Command.VIEW, Command.WRITE])
    """

    def __init__(self, commands: Iterable[Command]) -> None:
        self._commands: Iterator[Command] = iter(commands)

    def next_command(self, session: ReconcileSession) -> Command:
        return next(self._commands, Command.QUIT)


class ReconcileListener:
    """Presentation hooks called by the Reconciler. All default to no-ops."""

    def on_state(self, state: ReconcileState) -> None:
        """Called after every state transition."""

    def on_scan(self, session: ReconcileSession) -> None:
        """Called after a scan, before diffing."""

    def on_diff(self, session: ReconcileSession) -> None:
        """Called when the dry-run diff is ready."""

    def on_in_sync(self, session: ReconcileSession) -> None:
        """Called when no changes are needed."""

    def on_view(self, session: ReconcileSession) -> None:
        """Called for VIEW: show the full proposed manifest."""

    def on_removals(self, session: ReconcileSession, entries: tuple[RemovalEntry, ...]) -> None:
        """Called for REMOVALS: show lines pending removal."""

    def on_details(self, session: ReconcileSession) -> None:
        """Called for DETAILS: show scan details."""

    def on_write(self, session: ReconcileSession, result: WriteResult) -> None:
        """Called after a write attempt."""

    def on_quit(self, session: ReconcileSession) -> None:
        """Called when the user quits without writing."""


class Reconciler:
    """Runs the reconciliation cycle for one root.

    Args:
        root: Directory to reconcile.
        commands: Source of decisions.
        config: Settings. Defaults are used if None.
        listener: Presentation hooks. No-ops if None.
        scanner: Scanner to use. Built from config if None.

    Example:
        >>> reconciler = Reconciler(root, ScriptedCommands([Command.WRITE]))
        >>> outcome = reconciler.run()
        >>> outcome.written
        True
    """

    def __init__(
        self,
        root: Path,
        commands: CommandSource,
        *,
        config: IsosyncConfig | None = None,
        listener: ReconcileListener | None = None,
        scanner: IsoScanner | None = None,
    ) -> None:
        self._root = root
        self._commands = commands
        self._config = config or IsosyncConfig()
        self._listener = listener or ReconcileListener()
        self._scanner = scanner or IsoScanner(self._config)
        self._state = ReconcileState.IDLE
        self._history: list[ReconcileState] = [ReconcileState.IDLE]

    @property
    def state(self) -> ReconcileState:
        """Current state."""
        return self._state

    @property
    def history(self) -> tuple[ReconcileState, ...]:
        """All states visited so far, in order."""
        return tuple(self._history)

    def _transition(self, target: ReconcileState) -> None:
        """Move to target, rejecting transitions the machine does not allow.

        Raises:
            ReconcileStateError: If the transition is not allowed.
        """
        if target not in _TRANSITIONS[self._state]:
            msg = f"Invalid transition: {self._state.value} -> {target.value}"
            raise ReconcileStateError(msg)
        logger.debug("Reconcile state: %s -> %s", self._state.value, target.value)
        self._state = target
        self._history.append(target)
        self._listener.on_state(target)

    def _scan(self, session: ReconcileSession) -> ReconcileSession:
        """SCANNING -> BUILT -> DIFFING, returning the updated session."""
        scan_result = self._scanner.scan(self._root)
        self._transition(ReconcileState.BUILT)
        manifest = build_manifest(scan_result, self._config.group_order)
        session = replace(session, scan_result=scan_result, manifest=manifest, diff=None)
        self._listener.on_scan(session)

        self._transition(ReconcileState.DIFFING)
        diff = compute_diff(session.current_text, manifest.to_text())
        return replace(session, diff=diff)

    def run(self) -> ReconcileOutcome:
        """Run the cycle until DONE.

        Returns:
            ReconcileOutcome describing how the cycle ended.

        Raises:
            RootNotFoundError: If the root does not exist.
            ScanError: If the root cannot be listed.
            ManifestReadError: If the persisted manifest cannot be read.
            ReconcileStateError: If run() is called twice.
        """
        self._transition(ReconcileState.SCANNING)
        path = manifest_path(self._root, self._config.manifest_name)
        session = ReconcileSession(
            root=self._root,
            manifest_path=path,
            current_text=read_manifest_text(path),
        )

        while True:
            session = self._scan(session)

            if session.in_sync:
                self._listener.on_in_sync(session)
                self._transition(ReconcileState.DONE)
                return ReconcileOutcome(
                    state=ReconcileState.DIFFING, session=session, in_sync=True
                )

            self._transition(ReconcileState.AWAITING_DECISION)
            self._listener.on_diff(session)

            outcome = self._await_decision(session)
            if outcome is not None:
                return outcome
            # RESCAN: back to SCANNING with the same baseline

    def _await_decision(self, session: ReconcileSession) -> ReconcileOutcome | None:
        """Process decisions until WRITE, QUIT or RESCAN.

        Returns:
            The final outcome, or None when a rescan was requested.
        """
        while True:
            command = self._commands.next_command(session)
            logger.debug("Decision: %s", command.value)

            if command.is_read_only:
                self._transition(ReconcileState.AWAITING_DECISION)
                if command == Command.VIEW:
                    self._listener.on_view(session)
                elif command == Command.REMOVALS:
                    entries = (
                        classify_removals(session.diff, self._config.extension)
                        if session.diff is not None
                        else ()
                    )
                    self._listener.on_removals(session, entries)
                else:
                    self._listener.on_details(session)
                continue

            if command == Command.RESCAN:
                self._transition(ReconcileState.SCANNING)
                return None

            if command == Command.QUIT:
                self._listener.on_quit(session)
                self._transition(ReconcileState.DONE)
                return ReconcileOutcome(state=ReconcileState.AWAITING_DECISION, session=session)

            return self._write(session)

    def _write(self, session: ReconcileSession) -> ReconcileOutcome:
        """WRITING -> VERIFIED | VERIFICATION_FAILED | WRITE_FAILED -> DONE."""
        self._transition(ReconcileState.WRITING)
        manifest = session.manifest or Manifest()
        result = write_manifest(self._root, manifest, config=self._config)

        final = {
            WriteStatus.VERIFIED: ReconcileState.VERIFIED,
            WriteStatus.VERIFICATION_FAILED: ReconcileState.VERIFICATION_FAILED,
        }.get(result.status, ReconcileState.WRITE_FAILED)
        self._transition(final)
        self._listener.on_write(session, result)
        self._transition(ReconcileState.DONE)
        return ReconcileOutcome(state=final, session=session, write_result=result)
