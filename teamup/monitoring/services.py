import json
import logging
import os
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from fastapi import Request

logger = logging.getLogger(__name__)


class ErrorLogSink:
    """
    Journal d'erreurs client, un fichier JSON Lines par jour
    (``errors-YYYY-MM-DD.jsonl``), en ajout seulement.
    """

    def __init__(self, logs_dir: str):
        self.logs_dir = logs_dir

    def path_for(self, day: date) -> str:
        return os.path.join(self.logs_dir, f"errors-{day.isoformat()}.jsonl")

    def append(self, entries: Iterable[Dict[str, Any]], day: Optional[date] = None) -> int:
        entries = list(entries)
        if not entries:
            return 0

        os.makedirs(self.logs_dir, exist_ok=True)
        log_file = self.path_for(day or datetime.now(timezone.utc).date())
        lines = "".join(json.dumps(entry, ensure_ascii=False, default=str) + "\n" for entry in entries)
        with open(log_file, "a", encoding="utf-8") as f:
            f.write(lines)

        logger.info(f"✅ Saved {len(entries)} error logs to {log_file}")
        return len(entries)

    def read(self, day: date) -> List[Dict[str, Any]]:
        log_file = self.path_for(day)
        if not os.path.exists(log_file):
            return []

        logs = []
        with open(log_file, encoding="utf-8") as f:
            for line_no, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    logs.append(json.loads(line))
                except json.JSONDecodeError:
                    logger.warning(f"⚠️ Ligne illisible ignorée : {log_file}:{line_no}")
        return logs

    def report_exception(self, exc: BaseException, url: str) -> None:
        """Trace une erreur serveur inattendue dans le journal du jour."""
        self.append([{
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "message": f"{type(exc).__name__}: {exc}",
            "url": url,
            "userAgent": "server",
            "source": "server",
        }])


def get_error_sink(request: Request) -> ErrorLogSink:
    return request.app.state.error_sink
