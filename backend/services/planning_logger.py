"""
Planning session logging and metrics.

Provides contextual logging and stage timing for planning sessions.
"""

import json
import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Generator

logger = logging.getLogger("gatewayplanner.planning")

TEXT_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


@dataclass
class StageMetrics:
    """Metrics for a single planning stage"""
    stage: str
    started_at: datetime
    ended_at: Optional[datetime] = None
    duration_ms: Optional[float] = None
    success: bool = True
    error: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def complete(self, success: bool = True, error: Optional[str] = None) -> None:
        """Mark stage as complete"""
        self.ended_at = datetime.utcnow()
        self.duration_ms = (self.ended_at - self.started_at).total_seconds() * 1000
        self.success = success
        self.error = error

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stage": self.stage,
            "startedAt": self.started_at.isoformat() + "Z",
            "endedAt": self.ended_at.isoformat() + "Z" if self.ended_at else None,
            "durationMs": self.duration_ms,
            "success": self.success,
            "error": self.error,
            "metadata": self.metadata,
        }


class PlanningLogger:
    """
    Structured logger for one planning session.

    Prefixes messages with the session id and records stage timings.
    """

    # Older stages are dropped past this many
    MAX_STAGES = 100

    def __init__(self, session_id: str):
        self.session_id = session_id
        self.stages: List[StageMetrics] = []

    def _log(self, level: int, message: str, **kwargs: Any) -> None:
        """Log with session context"""
        extra = {"session_id": self.session_id, **kwargs}
        logger.log(level, f"[{self.session_id}] {message}", extra=extra)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log(logging.ERROR, message, **kwargs)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log(logging.DEBUG, message, **kwargs)

    @contextmanager
    def stage(
        self,
        name: str,
        **metadata: Any,
    ) -> Generator[StageMetrics, None, None]:
        """
        Context manager for timing planning stages.

        Usage:
            with plog.stage("auto_assign") as stage:
                # do work
                stage.metadata["unassigned"] = 0
        """
        stage_metrics = StageMetrics(
            stage=name,
            started_at=datetime.utcnow(),
            metadata=metadata,
        )
        self.debug(f"Stage '{name}' started")

        try:
            yield stage_metrics
            stage_metrics.complete(success=True)
            self.info(
                f"Stage '{name}' completed in {stage_metrics.duration_ms:.1f}ms"
            )
        except Exception as e:
            stage_metrics.complete(success=False, error=str(e))
            self.error(f"Stage '{name}' failed: {e}")
            raise
        finally:
            self.stages.append(stage_metrics)
            del self.stages[:-self.MAX_STAGES]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sessionId": self.session_id,
            "stages": [s.to_dict() for s in self.stages],
        }


class JsonLogFormatter(logging.Formatter):
    """Formats each record as one JSON object per line"""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "time": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        session_id = getattr(record, "session_id", None)
        if session_id:
            payload["sessionId"] = session_id
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def build_log_formatter(log_format: str = "text") -> logging.Formatter:
    """JSON formatter for ``log_format == "json"``, plain text otherwise"""
    if log_format == "json":
        return JsonLogFormatter()
    return logging.Formatter(TEXT_LOG_FORMAT)


def configure_planning_logging(
    level: int = logging.INFO,
    formatter: Optional[logging.Formatter] = None,
) -> None:
    """
    Configure planning logging.

    Args:
        level: Logging level
        formatter: Optional formatter; plain text by default
    """
    if formatter is None:
        formatter = build_log_formatter()

    planning_logger = logging.getLogger("gatewayplanner.planning")
    planning_logger.setLevel(level)
    if not planning_logger.handlers:
        planning_logger.addHandler(logging.StreamHandler())
    for handler in planning_logger.handlers:
        handler.setFormatter(formatter)
    planning_logger.propagate = False
