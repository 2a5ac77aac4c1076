"""Local report history: a JSON file of saved reports on the user's machine."""

import json
import logging
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path

from trendfusion.models import CompositeResponse, SavedReport
from trendfusion.payload import to_payload

logger = logging.getLogger(__name__)


class HistoryError(ValueError):
    """Raised when the history file exists but cannot be read as saved reports."""


def load_history(history_file: Path) -> list[SavedReport]:
    """Return saved reports, oldest first. A missing file is an empty history.

    Raises:
        HistoryError: If the file is not a JSON list of saved reports. The
            file is left untouched so it can be repaired by hand.
    """
    if not history_file.exists():
        return []
    try:
        raw = json.loads(history_file.read_text(encoding="utf-8"))
        return [SavedReport(**entry) for entry in raw]
    except (json.JSONDecodeError, TypeError) as exc:
        raise HistoryError(f"Cannot read report history {history_file}: {exc}") from exc


def _same_slot(report: SavedReport, topic: str, detail_level: str) -> bool:
    return report.topic.lower() == topic.lower() and report.detail_level == detail_level


def record_report(history_file: Path, result: CompositeResponse, now: datetime | None = None) -> list[SavedReport]:
    """Save ``result`` to history, replacing any report for the same topic and depth.

    Topics match case-insensitively. The new report goes to the end.

    Returns:
        The updated history.
    """
    detail_level = result.detail_level.value
    reports = [r for r in load_history(history_file) if not _same_slot(r, result.topic, detail_level)]
    reports.append(
        SavedReport(
            topic=result.topic,
            detail_level=detail_level,
            summary=result.summary.text,
            details=to_payload(result),
            last_updated=(now or datetime.now(timezone.utc)).isoformat(),
        )
    )

    history_file.parent.mkdir(parents=True, exist_ok=True)
    history_file.write_text(
        json.dumps([asdict(r) for r in reports], indent=2, ensure_ascii=False),
        encoding="utf-8",
    )
    logger.info("Report history updated: %s (%d reports)", history_file, len(reports))
    return reports
