"""JSON Lines log of retrieval outcomes, one record per retrieval call."""
import json
import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from ..config import RETRIEVAL_LOG_PATH

logger = logging.getLogger(__name__)

# Retrieval modes
ENHANCED = "enhanced"
FALLBACK = "fallback"
EMPTY = "empty"
DEGRADED = "degraded"


class RetrievalLogger:
    """
    Append retrieval outcomes to a JSON Lines file.

    Every call to the orchestrator produces one record, so a retrieval that
    fell back or degraded to zero evidence is always visible afterwards.
    """

    def __init__(self, log_file_path: str = RETRIEVAL_LOG_PATH):
        self.log_file_path = Path(log_file_path)
        self.log_file_path.parent.mkdir(parents=True, exist_ok=True)
        self._file = open(self.log_file_path, "a", encoding="utf-8")
        self._lock = threading.Lock()
        logger.info(f"RetrievalLogger writing to {self.log_file_path}")

    def log_retrieval(
        self,
        query: str,
        project_id: str,
        mode: str,
        chunks_retrieved: int,
        latency_ms: int,
        intent: Optional[Dict[str, Any]] = None,
        error: Optional[str] = None
    ) -> None:
        """
        Write one retrieval record.

        Args:
            query: Query text
            project_id: Project searched
            mode: "enhanced", "fallback", "empty" or "degraded"
            chunks_retrieved: Number of chunks returned to the caller
            latency_ms: Wall-clock time of the retrieval call
            intent: Advisory intent classification, if computed
            error: Text of the failure that triggered fallback, if any
        """
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "query": query,
            "project_id": project_id,
            "mode": mode,
            "chunks_retrieved": chunks_retrieved,
            "latency_ms": latency_ms,
            "intent": intent,
            "error": error,
        }

        # The file handle is shared across request threads
        with self._lock:
            self._file.write(json.dumps(entry) + "\n")
            self._file.flush()

    def close(self) -> None:
        with self._lock:
            if not self._file.closed:
                self._file.close()
