"""In-process metrics collector with Prometheus text exposition."""

from __future__ import annotations

from collections import defaultdict
from threading import Lock
import time
from typing import Dict, Tuple


_lock = Lock()
_started_at = time.time()

_http_requests_total: Dict[Tuple[str, str, str], int] = defaultdict(int)
_http_request_duration_sum: Dict[Tuple[str, str], float] = defaultdict(float)
_http_request_duration_count: Dict[Tuple[str, str], int] = defaultdict(int)
_webhook_events_total: Dict[Tuple[str, str], int] = defaultdict(int)
_entity_upserts_total: Dict[Tuple[str, str], int] = defaultdict(int)
_backfill_assets_total: Dict[str, int] = defaultdict(int)


def _escape_label(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def _normalize_label(value: str | None, *, fallback: str = "none") -> str:
    normalized = (value or "").strip()
    return normalized or fallback


def record_http_request(*, method: str, path: str, status_code: int, duration_seconds: float) -> None:
    status = str(status_code)
    method_label = method.upper()
    path_label = path or "unknown"
    duration = max(duration_seconds, 0.0)

    with _lock:
        _http_requests_total[(method_label, path_label, status)] += 1
        _http_request_duration_sum[(method_label, path_label)] += duration
        _http_request_duration_count[(method_label, path_label)] += 1


def record_webhook_event(*, status: str, reason: str | None = None) -> None:
    with _lock:
        _webhook_events_total[(_normalize_label(status), _normalize_label(reason))] += 1


def record_entity_upsert(*, kind: str, action: str) -> None:
    with _lock:
        _entity_upserts_total[(_normalize_label(kind), _normalize_label(action))] += 1


def record_backfill_assets(*, outcome: str, count: int = 1) -> None:
    if count <= 0:
        return
    with _lock:
        _backfill_assets_total[_normalize_label(outcome)] += int(count)


def _render_counter(lines: list[str], name: str, help_text: str, labels: Tuple[str, ...], values: dict) -> None:
    lines.append(f"# HELP {name} {help_text}")
    lines.append(f"# TYPE {name} counter")
    for key, value in sorted(values.items()):
        key_tuple = key if isinstance(key, tuple) else (key,)
        rendered = ",".join(
            f'{label}="{_escape_label(part)}"' for label, part in zip(labels, key_tuple)
        )
        lines.append(f"{name}{{{rendered}}} {value}")


def render_prometheus_metrics(*, app_name: str, app_version: str, env: str) -> str:
    uptime = max(time.time() - _started_at, 0.0)

    with _lock:
        http_total = dict(_http_requests_total)
        duration_sum = dict(_http_request_duration_sum)
        duration_count = dict(_http_request_duration_count)
        webhook_total = dict(_webhook_events_total)
        upserts_total = dict(_entity_upserts_total)
        backfill_total = dict(_backfill_assets_total)

    lines = [
        "# HELP mux_sync_build_info Build metadata.",
        "# TYPE mux_sync_build_info gauge",
        (
            f'mux_sync_build_info{{app_name="{_escape_label(app_name)}",'
            f'version="{_escape_label(app_version)}",env="{_escape_label(env)}"}} 1'
        ),
        "# HELP mux_sync_process_uptime_seconds Process uptime in seconds.",
        "# TYPE mux_sync_process_uptime_seconds gauge",
        f"mux_sync_process_uptime_seconds {uptime:.6f}",
    ]

    _render_counter(
        lines,
        "mux_sync_http_requests_total",
        "Total HTTP requests.",
        ("method", "path", "status"),
        http_total,
    )

    lines.extend(
        [
            "# HELP mux_sync_http_request_duration_seconds Request duration summary.",
            "# TYPE mux_sync_http_request_duration_seconds summary",
        ]
    )
    for (method, path), value in sorted(duration_sum.items()):
        lines.append(
            f'mux_sync_http_request_duration_seconds_sum{{method="{_escape_label(method)}",'
            f'path="{_escape_label(path)}"}} {value:.6f}'
        )
    for (method, path), value in sorted(duration_count.items()):
        lines.append(
            f'mux_sync_http_request_duration_seconds_count{{method="{_escape_label(method)}",'
            f'path="{_escape_label(path)}"}} {value}'
        )

    _render_counter(
        lines,
        "mux_webhook_events_total",
        "Webhook deliveries by outcome.",
        ("status", "reason"),
        webhook_total,
    )
    _render_counter(
        lines,
        "mux_entity_upserts_total",
        "Local entity writes by object kind.",
        ("kind", "action"),
        upserts_total,
    )
    _render_counter(
        lines,
        "mux_backfill_assets_total",
        "Assets visited by backfill runs.",
        ("outcome",),
        backfill_total,
    )

    return "\n".join(lines) + "\n"


def reset_metrics_for_tests() -> None:
    with _lock:
        _http_requests_total.clear()
        _http_request_duration_sum.clear()
        _http_request_duration_count.clear()
        _webhook_events_total.clear()
        _entity_upserts_total.clear()
        _backfill_assets_total.clear()
