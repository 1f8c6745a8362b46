"""SQLite record store that raises trigger events around its writes.

Each write operation is one trigger invocation per phase:

    before dispatch -> write rows -> after dispatch -> commit policy

and runs inside its own SAVEPOINT. Savepoints nest, so after-hooks may
write other record types through the same store and those cascaded
writes share the outer operation's fate.
"""

import json
import logging
import sqlite3
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path

from triggerkit.auth.permissions import capabilities_for
from triggerkit.auth.types import UserContext
from triggerkit.bindings import HandlerBinding, import_binding_modules, load_bindings
from triggerkit.config import CommitPolicy, TriggerConfig
from triggerkit.core.types import Operation, Phase, Record
from triggerkit.dispatch import TriggerContext, dispatch
from triggerkit.persistence.adapter import SaveResult
from triggerkit.persistence.sequences import SequenceService

logger = logging.getLogger(__name__)

# Row state before a write: (data, deleted) or None if the row did not exist
RowState = tuple[str, int] | None


def _batch_type(records: Sequence[Record]) -> str | None:
    types = {record.type for record in records}
    if not types:
        return None
    if len(types) > 1:
        raise ValueError(
            f"A batch must hold records of one type, got: {', '.join(sorted(types))}"
        )
    return types.pop()


class SQLiteRecordStore:
    """Trigger-aware record store backed by SQLite.

    Records of every type live in one _records table as JSON. Deletes are
    soft so that undelete can restore them.

    Args:
        db_path: SQLite database path
        bindings: Record type -> handler binding; unbound types are written
            without raising events
        user_context: The acting user, used to derive type capabilities
        commit_policy: What to do when records come back annotated
    """

    def __init__(
        self,
        db_path: Path | str = ":memory:",
        *,
        bindings: dict[str, HandlerBinding] | None = None,
        user_context: UserContext | None = None,
        commit_policy: CommitPolicy = CommitPolicy.ALL_OR_NOTHING,
    ):
        self.db_path = str(db_path)
        self.bindings = dict(bindings or {})
        self.user_context = user_context
        self.commit_policy = commit_policy
        self.conn: sqlite3.Connection | None = None
        self._sequence_service: SequenceService | None = None
        self._depth = 0

    @classmethod
    def from_config(
        cls, config: TriggerConfig, user_context: UserContext | None = None
    ) -> "SQLiteRecordStore":
        """Build a store from TriggerConfig, importing bound handler modules."""
        bindings: dict[str, HandlerBinding] = {}
        if config.bindings_path.exists():
            bindings = load_bindings(config.bindings_path)
            import_binding_modules(bindings)
        else:
            logger.warning(
                "Bindings file %s not found; no triggers will fire",
                config.bindings_path,
            )
        return cls(
            config.db_path,
            bindings=bindings,
            user_context=user_context,
            commit_policy=config.commit_policy,
        )

    def connect(self) -> None:
        """Establish database connection."""
        # Autocommit; transactions are managed explicitly with savepoints
        self.conn = sqlite3.connect(
            self.db_path, check_same_thread=False, isolation_level=None
        )
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS _records (
                id TEXT PRIMARY KEY,
                type TEXT NOT NULL,
                data TEXT NOT NULL,
                deleted INTEGER NOT NULL DEFAULT 0
            )
        """)
        self._sequence_service = SequenceService(self.conn)

    def close(self) -> None:
        """Close database connection."""
        if self.conn:
            self.conn.close()
            self.conn = None

    def _connection(self) -> sqlite3.Connection:
        if not self.conn:
            raise RuntimeError("Database not connected")
        return self.conn

    # -- reads ---------------------------------------------------------------

    def get(
        self, record_type: str, id: str, include_deleted: bool = False
    ) -> Record | None:
        """Fetch a single record by id, as an independent Record."""
        sql = "SELECT id, type, data FROM _records WHERE id = ? AND type = ?"
        if not include_deleted:
            sql += " AND deleted = 0"
        row = self._connection().execute(sql, [id, record_type]).fetchone()
        if row is None:
            return None
        return Record(type=row["type"], fields=json.loads(row["data"]), id=row["id"])

    def _load(
        self, record_type: str, records: Sequence[Record], deleted: bool
    ) -> dict[str, Record]:
        """Load stored state for each record in the batch, keyed by id."""
        loaded: dict[str, Record] = {}
        for record in records:
            if record.id is None:
                raise ValueError(f"{record_type} record has no id")
            stored = self.get(record_type, record.id, include_deleted=deleted)
            if stored is None or self._is_deleted(record.id) != deleted:
                state = "deleted" if deleted else "active"
                raise ValueError(f"No {state} {record_type} record with id {record.id}")
            loaded[record.id] = stored
        return loaded

    def _is_deleted(self, id: str) -> bool:
        row = self._connection().execute(
            "SELECT deleted FROM _records WHERE id = ?", [id]
        ).fetchone()
        return bool(row and row["deleted"])

    # -- writes --------------------------------------------------------------

    def insert(self, records: Sequence[Record]) -> SaveResult:
        """Insert a batch, assigning sequence ids to records without one."""
        record_type = _batch_type(records)
        if record_type is None:
            return SaveResult()
        conn = self._connection()
        binding = self.bindings.get(record_type)
        abbreviation = binding.abbreviation if binding else record_type[:3].upper()
        batch = list(records)
        assigned: list[Record] = []

        try:
            with self._savepoint() as savepoint:
                self._fire(Phase.BEFORE, Operation.INSERT, record_type, new=batch)
                captured: dict[str, RowState] = {}
                for record in batch:
                    if record.id is None:
                        record.id = self._sequence_service.next_id(
                            record_type, abbreviation
                        )
                        assigned.append(record)
                    captured[record.id] = None
                    conn.execute(
                        "INSERT INTO _records (id, type, data, deleted) VALUES (?, ?, ?, 0)",
                        [record.id, record_type, self._dumps(record)],
                    )
                self._fire(Phase.AFTER, Operation.INSERT, record_type, new=batch)
                result = self._finish(savepoint, batch, captured)
        except Exception:
            for record in assigned:
                record.id = None
            raise

        # Ids handed out for rows that were rolled back are not kept. Under
        # PARTIAL the sequence still advances past them, leaving a gap.
        for record in assigned:
            if any(record is rejected for rejected in result.rejected):
                record.id = None
        return result

    def update(self, records: Sequence[Record]) -> SaveResult:
        """Update a batch of existing records with their current field values."""
        record_type = _batch_type(records)
        if record_type is None:
            return SaveResult()
        conn = self._connection()
        batch = list(records)
        prior = self._load(record_type, batch, deleted=False)

        with self._savepoint() as savepoint:
            self._fire(
                Phase.BEFORE, Operation.UPDATE, record_type, new=batch, old_map=prior
            )
            captured = self._capture(prior)
            for record in batch:
                conn.execute(
                    "UPDATE _records SET data = ? WHERE id = ?",
                    [self._dumps(record), record.id],
                )
            self._fire(
                Phase.AFTER, Operation.UPDATE, record_type, new=batch, old_map=prior
            )
            return self._finish(savepoint, batch, captured)

    def delete(self, records: Sequence[Record]) -> SaveResult:
        """Soft-delete a batch identified by the records' ids.

        Handlers see the stored state of the records, not the passed objects.
        """
        record_type = _batch_type(records)
        if record_type is None:
            return SaveResult()
        conn = self._connection()
        prior = self._load(record_type, records, deleted=False)
        batch = list(prior.values())

        with self._savepoint() as savepoint:
            self._fire(Phase.BEFORE, Operation.DELETE, record_type, old_map=prior)
            captured = self._capture(prior)
            conn.executemany(
                "UPDATE _records SET deleted = 1 WHERE id = ?",
                [[id] for id in prior],
            )
            self._fire(Phase.AFTER, Operation.DELETE, record_type, old_map=prior)
            return self._finish(savepoint, batch, captured)

    def undelete(self, records: Sequence[Record]) -> SaveResult:
        """Restore soft-deleted records identified by the records' ids."""
        record_type = _batch_type(records)
        if record_type is None:
            return SaveResult()
        conn = self._connection()
        restored = self._load(record_type, records, deleted=True)
        batch = list(restored.values())

        with self._savepoint() as savepoint:
            captured = self._capture(restored)
            conn.executemany(
                "UPDATE _records SET deleted = 0 WHERE id = ?",
                [[id] for id in restored],
            )
            self._fire(Phase.AFTER, Operation.UNDELETE, record_type, new=batch)
            return self._finish(savepoint, batch, captured)

    # -- internals -----------------------------------------------------------

    def _fire(
        self,
        phase: Phase,
        operation: Operation,
        record_type: str,
        *,
        new: list[Record] | None = None,
        old_map: dict[str, Record] | None = None,
    ) -> None:
        binding = self.bindings.get(record_type)
        if binding is None:
            return
        capabilities = capabilities_for(
            record_type, self.user_context, binding.permissions
        )
        context = TriggerContext.for_event(
            phase,
            operation,
            capabilities=capabilities,
            new=new,
            old_map=old_map,
        )
        dispatch(binding.handler, context)

    def _finish(
        self,
        savepoint: str,
        batch: list[Record],
        captured: dict[str, RowState],
    ) -> SaveResult:
        """Apply the commit policy to a batch after both phases ran."""
        rejected = [record for record in batch if record.has_errors]
        if not rejected:
            return SaveResult(saved=batch)

        if self.commit_policy is CommitPolicy.ALL_OR_NOTHING:
            self._connection().execute(f"ROLLBACK TO {savepoint}")
            logger.info(
                "Rolled back batch of %d %s records: %d rejected",
                len(batch),
                batch[0].type,
                len(rejected),
            )
            return SaveResult(rejected=batch)

        for record in rejected:
            self._restore(record.id, captured.get(record.id))
        logger.info(
            "Rolled back %d of %d %s records", len(rejected), len(batch), batch[0].type
        )
        return SaveResult(
            saved=[record for record in batch if not record.has_errors],
            rejected=rejected,
        )

    def _capture(self, records: dict[str, Record]) -> dict[str, RowState]:
        conn = self._connection()
        captured: dict[str, RowState] = {}
        for id in records:
            row = conn.execute(
                "SELECT data, deleted FROM _records WHERE id = ?", [id]
            ).fetchone()
            captured[id] = (row["data"], row["deleted"]) if row else None
        return captured

    def _restore(self, id: str, state: RowState) -> None:
        conn = self._connection()
        if state is None:
            conn.execute("DELETE FROM _records WHERE id = ?", [id])
            return
        data, deleted = state
        conn.execute(
            "UPDATE _records SET data = ?, deleted = ? WHERE id = ?", [data, deleted, id]
        )

    @contextmanager
    def _savepoint(self) -> Iterator[str]:
        conn = self._connection()
        self._depth += 1
        name = f"sp_{self._depth}"
        conn.execute(f"SAVEPOINT {name}")
        try:
            yield name
        except BaseException:
            conn.execute(f"ROLLBACK TO {name}")
            conn.execute(f"RELEASE {name}")
            raise
        else:
            conn.execute(f"RELEASE {name}")
        finally:
            self._depth -= 1

    @staticmethod
    def _dumps(record: Record) -> str:
        return json.dumps(record.fields, default=str)
