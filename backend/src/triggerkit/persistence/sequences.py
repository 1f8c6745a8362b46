"""Sequence management for record id generation.

Ids have the format {ABBREV}-{SEQUENCE}, e.g. OPP-00001, ACC-00042.
Sequences are kept per record type.
"""

from typing import Any


class SequenceService:
    """Manages per-type sequences in the store's _sequences table.

    Never commits: increments belong to the caller's transaction, so a
    rolled-back insert also rolls back the ids it consumed.
    """

    def __init__(self, conn: Any):
        self.conn = conn
        self._ensure_table()

    def _ensure_table(self) -> None:
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS _sequences (
                record_type TEXT PRIMARY KEY,
                next_value INTEGER NOT NULL DEFAULT 1
            )
        """)

    def next_id(self, record_type: str, abbreviation: str) -> str:
        """Generate the next id for a record type.

        Returns:
            Formatted id like "OPP-00001"
        """
        row = self.conn.execute(
            "SELECT next_value FROM _sequences WHERE record_type = ?",
            [record_type],
        ).fetchone()

        if row:
            current_value = row[0]
            self.conn.execute(
                "UPDATE _sequences SET next_value = next_value + 1 WHERE record_type = ?",
                [record_type],
            )
        else:
            current_value = 1
            self.conn.execute(
                "INSERT INTO _sequences (record_type, next_value) VALUES (?, 2)",
                [record_type],
            )

        return f"{abbreviation}-{current_value:05d}"

    def current_value(self, record_type: str) -> int:
        """Get the last issued sequence value, 0 if none issued yet."""
        row = self.conn.execute(
            "SELECT next_value - 1 FROM _sequences WHERE record_type = ?",
            [record_type],
        ).fetchone()
        if row is None:
            return 0
        return row[0]
