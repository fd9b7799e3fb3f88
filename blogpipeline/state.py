"""Per-run round bookkeeping for resume and idempotent re-runs."""

from datetime import datetime, timezone

from .config import ARTIFACT_PATHS

# Ordered pipeline rounds
ROUNDS = [
    "trends", "ideate", "outline", "draft", "polish", "meta", "publish",
]


class RunState:
    """Tracks completion per round for one run.

    Each round records: status (done/failed), timestamp, artifact metadata.
    Re-running a round that is already done returns its stored artifact
    instead of recomputing it, unless forced.
    """

    def __init__(self, run_id: str, rounds: dict = None):
        self.run_id = run_id
        self.rounds = rounds if rounds is not None else {}

    @classmethod
    def load(cls, store, run_id: str) -> "RunState":
        data = store.read_artifact(cls.path_for(run_id)) or {}
        return cls(run_id, data.get("rounds", {}))

    @staticmethod
    def path_for(run_id: str) -> str:
        return ARTIFACT_PATHS["state"].format(run_id=run_id)

    def is_done(self, round_name: str) -> bool:
        return self.rounds.get(round_name, {}).get("status") == "done"

    def is_failed(self, round_name: str) -> bool:
        return self.rounds.get(round_name, {}).get("status") == "failed"

    def complete_round(self, round_name: str, artifacts: dict = None):
        self.rounds[round_name] = {
            "status": "done",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        if artifacts:
            self.rounds[round_name]["artifacts"] = artifacts

    def fail_round(self, round_name: str, error: str = ""):
        self.rounds[round_name] = {
            "status": "failed",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "error": error,
        }

    def get_artifact(self, round_name: str, key: str, default=None):
        return self.rounds.get(round_name, {}).get("artifacts", {}).get(key, default)

    def reset(self, round_name: str = None):
        """Clear one round, or all rounds (for force re-runs)."""
        if round_name is None:
            self.rounds = {}
        else:
            self.rounds.pop(round_name, None)

    def summary(self) -> str:
        lines = []
        for name in ROUNDS:
            status = self.rounds.get(name, {}).get("status", "pending")
            marker = {"done": "+", "failed": "!", "pending": " "}.get(status, "?")
            lines.append(f"  [{marker}] {name}")
        return "\n".join(lines)

    def save(self, store):
        store.write_artifact(self.path_for(self.run_id), {
            "run_id": self.run_id,
            "rounds": self.rounds,
        })
