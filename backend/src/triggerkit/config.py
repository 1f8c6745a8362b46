"""Runtime configuration for triggerkit."""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class CommitPolicy(Enum):
    """How the store treats a batch in which some records carry errors.

    ALL_OR_NOTHING: any annotated record rolls back the whole operation
    PARTIAL: only annotated records are rolled back
    """

    ALL_OR_NOTHING = "all_or_nothing"
    PARTIAL = "partial"


@dataclass
class TriggerConfig:
    """Trigger framework configuration.

    Attributes:
        bindings_path: YAML file binding record types to handlers
        db_path: SQLite path for the reference record store
        commit_policy: Batch commit behaviour when records are annotated
    """

    bindings_path: Path
    db_path: str = ":memory:"
    commit_policy: CommitPolicy = CommitPolicy.ALL_OR_NOTHING

    @classmethod
    def from_env(cls, base_path: Path | None = None) -> TriggerConfig:
        """Create config from environment variables.

        - TRIGGERKIT_BINDINGS: bindings file (default {base_path}/triggers.yaml)
        - TRIGGERKIT_DB_PATH: store path (default in-memory)
        - TRIGGERKIT_COMMIT_POLICY: "all_or_nothing" or "partial"

        Raises:
            ValueError: For an unknown commit policy
        """
        bindings = os.environ.get("TRIGGERKIT_BINDINGS")
        if bindings:
            bindings_path = Path(bindings)
        else:
            bindings_path = (base_path or Path.cwd()) / "triggers.yaml"

        policy = os.environ.get("TRIGGERKIT_COMMIT_POLICY", "all_or_nothing")
        try:
            commit_policy = CommitPolicy(policy.lower())
        except ValueError:
            raise ValueError(
                f"Unsupported commit policy: {policy}. "
                "Expected 'all_or_nothing' or 'partial'."
            ) from None

        return cls(
            bindings_path=bindings_path,
            db_path=os.environ.get("TRIGGERKIT_DB_PATH", ":memory:"),
            commit_policy=commit_policy,
        )
