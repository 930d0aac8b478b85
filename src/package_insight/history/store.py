"""Snapshot history: one JSON record per analysis run.

Records are named ``analysis-<timestamp>.json`` with the snapshot's
``created_at`` made filename-safe (``:`` and ``.`` replaced by ``-``).
Filenames therefore sort chronologically, and that order is the series
order.

Loading is fail-closed: if any record cannot be read or parsed the whole
series is treated as unavailable (empty) and a warning names the culprit.
"""

from pathlib import Path
from typing import Optional, Tuple

from ..exceptions import HistoryError
from ..logging_config import get_logger
from ..snapshot.codec import snapshot_from_json, snapshot_to_json
from ..snapshot.models import Snapshot

logger = get_logger(__name__)

RECORD_PREFIX = "analysis-"
RECORD_SUFFIX = ".json"

HistorySeries = Tuple[Snapshot, ...]


def record_name(created_at: str) -> str:
    """Filename of the history record for a snapshot created at ``created_at``."""
    stamp = created_at.replace(":", "-").replace(".", "-")
    return f"{RECORD_PREFIX}{stamp}{RECORD_SUFFIX}"


class HistoryStore:
    """Append-only directory of snapshot records."""

    def __init__(self, history_dir: Path):
        self.history_dir = Path(history_dir)

    def append(self, snapshot: Snapshot) -> Path:
        """
        Write ``snapshot`` as a new record.

        Returns:
            Path of the written record

        Raises:
            HistoryError: If the record already exists or cannot be written
        """
        path = self.history_dir / record_name(snapshot.created_at)
        try:
            self.history_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise HistoryError(self.history_dir, f"cannot create history directory: {e}")

        try:
            # "x" never replaces an existing record
            with open(path, "x", encoding="utf-8") as f:
                f.write(snapshot_to_json(snapshot))
        except FileExistsError:
            raise HistoryError(path, "a record with this timestamp already exists")
        except OSError as e:
            raise HistoryError(path, f"OS error: {e}")

        logger.info("Analysis saved to history: %s", path)
        return path

    def record_paths(self) -> Tuple[Path, ...]:
        """Record files in series (filename) order."""
        if not self.history_dir.is_dir():
            return ()
        return tuple(sorted(p for p in self.history_dir.glob(f"*{RECORD_SUFFIX}") if p.is_file()))

    def load_all(self) -> HistorySeries:
        """
        Load every record in chronological order.

        Returns:
            All snapshots, or an empty tuple if any record is unreadable
        """
        series = []
        for path in self.record_paths():
            try:
                series.append(snapshot_from_json(path.read_text(encoding="utf-8")))
            except (OSError, ValueError) as e:
                # json.JSONDecodeError is a ValueError
                logger.warning(
                    "Ignoring history: record %s is unreadable (%s)", path.name, e
                )
                return ()

        logger.debug("Loaded %d history record(s) from %s", len(series), self.history_dir)
        return tuple(series)

    def latest_before(
        self, snapshot: Snapshot, series: Optional[HistorySeries] = None
    ) -> Optional[Snapshot]:
        """Most recent snapshot created strictly before ``snapshot``."""
        if series is None:
            series = self.load_all()
        return previous_snapshot(series, snapshot)


def previous_snapshot(series: HistorySeries, snapshot: Snapshot) -> Optional[Snapshot]:
    """Last entry of ``series`` whose record sorts before ``snapshot``'s."""
    current = record_name(snapshot.created_at)
    earlier = [s for s in series if record_name(s.created_at) < current]
    return earlier[-1] if earlier else None
