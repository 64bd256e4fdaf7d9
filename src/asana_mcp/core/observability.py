"""
Observability utilities for asana-mcp.

Provides log redaction, metrics emission, and audit logging for MCP tools
and for the requests the Asana client sends.

FastMCP Integration:
    Tool handlers are wrapped by ``mcp_tool`` through ``canonical_tool`` in
    ``asana_mcp.core.naming``; the decorator may also be applied directly:

        mcp = FastMCP("asanamcp")

        @mcp.tool()
        @mcp_tool(tool_name="asana_workspaces")
        async def asana_workspaces() -> dict:
            ...
"""

import asyncio
import functools
import logging
import re
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Final, List, Optional, Tuple, TypeVar, Union

from asana_mcp.core.context import generate_correlation_id, get_correlation_id, sync_request_context

logger = logging.getLogger(__name__)


# =============================================================================
# Sensitive Data Patterns for Redaction
# =============================================================================
# Asana personal access tokens look like "1/1234567890:abcdef..." or
# "2/1234/5678:abcdef..."; they usually show up behind "Bearer".

SENSITIVE_PATTERNS: Final[List[Tuple[str, str]]] = [
    (r"(?i)bearer\s+([a-zA-Z0-9_\-\.:/]+)", "BEARER_TOKEN"),
    (r"\b[12]/\d+(?:/\d+)?:[a-fA-F0-9]{16,}\b", "ASANA_TOKEN"),
    (
        r"(?i)(access[_-]?token|accesstoken)\s*[:=]\s*['\"]?([a-zA-Z0-9_\-\.:/]{16,})['\"]?",
        "ACCESS_TOKEN",
    ),
    (r"(?i)(api[_-]?key|apikey)\s*[:=]\s*['\"]?([a-zA-Z0-9_\-]{20,})['\"]?", "API_KEY"),
    (r"(?i)(password|passwd|pwd)\s*[:=]\s*['\"]?([^\s'\"]{4,})['\"]?", "PASSWORD"),
]
"""Patterns for detecting credentials that should never reach a log line.

Each tuple contains a regex pattern and a label used in the redaction marker.
"""

_SENSITIVE_KEYS: Final = frozenset(
    {
        "token",
        "asana_token",
        "access_token",
        "refresh_token",
        "api_key",
        "apikey",
        "authorization",
        "auth",
        "password",
        "secret",
        "credential",
        "credentials",
    }
)


def redact_sensitive_data(
    data: Any,
    *,
    patterns: Optional[List[Tuple[str, str]]] = None,
    redaction_format: str = "[REDACTED:{label}]",
    max_depth: int = 10,
) -> Any:
    """Recursively redact credentials from strings, dicts, and lists.

    Values under well-known sensitive keys (``authorization``, ``token``, ...)
    are replaced wholesale; strings are scanned with ``SENSITIVE_PATTERNS``.

    Args:
        data: The data to redact (string, dict, list, or nested structure)
        patterns: Custom patterns to use (default: SENSITIVE_PATTERNS)
        redaction_format: Format string for redaction markers (uses {label})
        max_depth: Maximum recursion depth

    Returns:
        A copy of the data with sensitive values redacted

    Example:
        >>> redact_sensitive_data("Authorization: Bearer 1/123:abc")
        'Authorization: [REDACTED:BEARER_TOKEN]'
    """
    if max_depth <= 0:
        return "[MAX_DEPTH_EXCEEDED]"

    check_patterns = patterns if patterns is not None else SENSITIVE_PATTERNS

    if isinstance(data, str):
        result = data
        for pattern, label in check_patterns:
            result = re.sub(pattern, redaction_format.format(label=label), result)
        return result

    if isinstance(data, dict):
        redacted: Dict[Any, Any] = {}
        for key, value in data.items():
            key_lower = str(key).lower().replace("-", "_")
            if key_lower in _SENSITIVE_KEYS:
                redacted[key] = f"[REDACTED:{key_lower.upper()}]"
            else:
                redacted[key] = redact_sensitive_data(
                    value,
                    patterns=check_patterns,
                    redaction_format=redaction_format,
                    max_depth=max_depth - 1,
                )
        return redacted

    if isinstance(data, (list, tuple)):
        items = [
            redact_sensitive_data(
                item,
                patterns=check_patterns,
                redaction_format=redaction_format,
                max_depth=max_depth - 1,
            )
            for item in data
        ]
        return tuple(items) if isinstance(data, tuple) else items

    return data


T = TypeVar("T")


class MetricType(Enum):
    """Types of metrics that can be emitted."""

    COUNTER = "counter"
    TIMER = "timer"


class AuditEventType(Enum):
    """Types of audit events."""

    TOOL_INVOCATION = "tool_invocation"


@dataclass
class Metric:
    """Structured metric data."""

    name: str
    value: Union[int, float]
    metric_type: MetricType
    labels: Dict[str, str] = field(default_factory=dict)
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "value": self.value,
            "type": self.metric_type.value,
            "labels": self.labels,
            "timestamp": self.timestamp,
        }


@dataclass
class AuditEvent:
    """Structured audit event."""

    event_type: AuditEventType
    details: Dict[str, Any] = field(default_factory=dict)
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    correlation_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "event_type": self.event_type.value,
            "timestamp": self.timestamp,
            "details": self.details,
        }
        if self.correlation_id:
            result["correlation_id"] = self.correlation_id
        return result


class MetricsCollector:
    """
    Collects and emits metrics to the standard logger.

    Metrics are logged as ``METRIC:`` lines with the structured payload
    attached under ``extra["metric"]``.
    """

    def __init__(self, prefix: str = "asana_mcp"):
        self.prefix = prefix
        self._logger = logging.getLogger(f"{__name__}.metrics")

    def emit(self, metric: Metric) -> None:
        self._logger.info(f"METRIC: {self.prefix}.{metric.name}", extra={"metric": metric.to_dict()})

    def counter(self, name: str, value: int = 1, labels: Optional[Dict[str, str]] = None) -> None:
        """Emit a counter metric."""
        self.emit(Metric(name=name, value=value, metric_type=MetricType.COUNTER, labels=labels or {}))

    def timer(self, name: str, duration_ms: float, labels: Optional[Dict[str, str]] = None) -> None:
        """Emit a timer metric (duration in milliseconds)."""
        self.emit(Metric(name=name, value=duration_ms, metric_type=MetricType.TIMER, labels=labels or {}))


# Global metrics collector
_metrics = MetricsCollector()


def get_metrics() -> MetricsCollector:
    """Get the global metrics collector."""
    return _metrics


class AuditLogger:
    """
    Structured audit logging for tool calls.

    Audit logs are written to a separate logger for easy filtering.
    """

    def __init__(self):
        self._logger = logging.getLogger(f"{__name__}.audit")

    def log(self, event: AuditEvent) -> None:
        if event.correlation_id is None:
            event.correlation_id = get_correlation_id() or None
        self._logger.info(f"AUDIT: {event.event_type.value}", extra={"audit": event.to_dict()})

    def tool_invocation(
        self,
        tool_name: str,
        success: bool = True,
        duration_ms: Optional[float] = None,
        **details: Any,
    ) -> None:
        """Log a tool invocation."""
        self.log(
            AuditEvent(
                event_type=AuditEventType.TOOL_INVOCATION,
                details={
                    "tool": tool_name,
                    "success": success,
                    "duration_ms": duration_ms,
                    **redact_sensitive_data(details),
                },
            )
        )


# Global audit logger
_audit = AuditLogger()


def _record_invocation(
    name: str,
    *,
    start: float,
    success: bool,
    error_msg: Optional[str],
    emit_metrics: bool,
    audit: bool,
) -> None:
    duration_ms = (time.perf_counter() - start) * 1000

    if emit_metrics:
        labels = {"tool": name, "status": "success" if success else "error"}
        _metrics.counter("tool.invocations", labels=labels)
        _metrics.timer("tool.latency", duration_ms, labels={"tool": name})

    if audit:
        _audit.tool_invocation(
            tool_name=name,
            success=success,
            duration_ms=round(duration_ms, 2),
            error=error_msg,
        )


def _envelope_failed(result: Any) -> bool:
    return isinstance(result, dict) and result.get("success") is False


def mcp_tool(
    tool_name: Optional[str] = None, emit_metrics: bool = True, audit: bool = True
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """
    Decorator for MCP tool handlers with observability.

    Automatically:
    - Binds a fresh correlation id for the call
    - Emits latency and status metrics
    - Creates audit log entries

    A handler that returns an error envelope (``success: False``) is counted
    as a failed invocation even though it did not raise.

    Args:
        tool_name: Override tool name (defaults to function name)
        emit_metrics: Whether to emit metrics
        audit: Whether to create audit log entries
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        name = tool_name or func.__name__

        @functools.wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> T:
            start = time.perf_counter()
            success = True
            error_msg = None

            with sync_request_context(correlation_id=generate_correlation_id(prefix=name)):
                try:
                    result = await func(*args, **kwargs)
                    if _envelope_failed(result):
                        success = False
                        error_msg = result.get("error")  # type: ignore[union-attr]
                    return result
                except Exception as e:
                    success = False
                    error_msg = str(e)
                    raise
                finally:
                    _record_invocation(
                        name,
                        start=start,
                        success=success,
                        error_msg=error_msg,
                        emit_metrics=emit_metrics,
                        audit=audit,
                    )

        @functools.wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> T:
            start = time.perf_counter()
            success = True
            error_msg = None

            with sync_request_context(correlation_id=generate_correlation_id(prefix=name)):
                try:
                    result = func(*args, **kwargs)
                    if _envelope_failed(result):
                        success = False
                        error_msg = result.get("error")  # type: ignore[union-attr]
                    return result
                except Exception as e:
                    success = False
                    error_msg = str(e)
                    raise
                finally:
                    _record_invocation(
                        name,
                        start=start,
                        success=success,
                        error_msg=error_msg,
                        emit_metrics=emit_metrics,
                        audit=audit,
                    )

        if asyncio.iscoroutinefunction(func):
            return async_wrapper  # type: ignore[return-value]
        return sync_wrapper

    return decorator
