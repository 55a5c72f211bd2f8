"""Debug logging of embedding backend requests and responses."""

import json
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional


class DebugLogger:
    """Writes one JSON file per backend request/response (singleton pattern)."""

    _enabled: bool = False
    _log_dir: Optional[Path] = None
    _lock = threading.Lock()

    @classmethod
    def configure(cls, enabled: bool = False, log_dir: Optional[Path] = None) -> None:
        """Configure the debug logger.

        Args:
            enabled: Whether debug logging is enabled
            log_dir: Directory for log files (default: ~/.chatter-rag/logs)
        """
        with cls._lock:
            cls._enabled = enabled
            cls._log_dir = log_dir or Path.home() / ".chatter-rag" / "logs"

            if cls._enabled:
                cls._log_dir.mkdir(parents=True, exist_ok=True)

    @classmethod
    def is_enabled(cls) -> bool:
        return cls._enabled

    @classmethod
    def log_request(cls, operation: str, payload: Dict[str, Any], request_id: Optional[str] = None, category: str = "general") -> str:
        """Log a request payload.

        Args:
            operation: Name of the operation (e.g., "embed", "tags")
            payload: Request payload to log
            request_id: Optional request ID; a UUID is generated when omitted
            category: Subdirectory for the log file (e.g., "embedding", "reranking")

        Returns:
            The request_id used, for pairing with log_response
        """
        if request_id is None:
            request_id = str(uuid.uuid4())
        if not cls._enabled:
            return request_id

        cls._log("request", operation, payload, request_id, category)
        return request_id

    @classmethod
    def log_response(cls, operation: str, payload: Dict[str, Any], request_id: Optional[str] = None, category: str = "general") -> None:
        """Log a response payload, paired with its request by request_id."""
        if not cls._enabled:
            return

        if request_id is None:
            request_id = str(uuid.uuid4())

        cls._log("response", operation, payload, request_id, category)

    @classmethod
    def _log(cls, log_type: str, operation: str, data: Dict[str, Any], request_id: str, category: str = "general") -> None:
        if not cls._enabled or not cls._log_dir:
            return

        category_dir = cls._log_dir / category
        category_dir.mkdir(parents=True, exist_ok=True)

        # Compact timestamp, e.g. 20251029T054015Z
        now = datetime.now(timezone.utc)
        timestamp = now.strftime('%Y%m%dT%H%M%SZ')
        filename = f"{operation}_{timestamp}_{request_id[:4]}_{log_type}.json"
        filepath = category_dir / filename

        log_entry = {
            "timestamp": now.isoformat(),
            "type": log_type,
            "operation": operation,
            "payload": data
        }

        with cls._lock:
            try:
                with open(filepath, "w", encoding="utf-8") as f:
                    json.dump(log_entry, f, indent=2, default=cls._json_serializer)
            except OSError:
                # Debug logging must never break an embedding call
                pass

    @staticmethod
    def _json_serializer(obj: Any) -> str:
        if isinstance(obj, datetime):
            return obj.isoformat()
        if isinstance(obj, Path):
            return str(obj)
        return str(obj)
