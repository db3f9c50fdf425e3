"""Operational endpoint:
    GET  /performance
"""

from __future__ import annotations

import os
import threading

import psutil

from fastapi import APIRouter

from invest_api.models.schemas import PerformanceResponse

router = APIRouter(tags=["Performance"])

# Updated by the timing middleware in main
_last_response_time_ms: float = 0.0


def record_response_time(elapsed_ms: float) -> None:
    global _last_response_time_ms
    _last_response_time_ms = elapsed_ms


def format_elapsed(total_ms: float) -> str:
    """Format milliseconds as HH:mm:ss.SSS."""
    hours, remainder = divmod(int(total_ms // 1000), 3600)
    minutes, secs = divmod(remainder, 60)
    millis = int(total_ms % 1000)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}.{millis:03d}"


def memory_mb() -> float:
    """Current process RSS in MiB."""
    return psutil.Process(os.getpid()).memory_info().rss / (1024 * 1024)


@router.get(
    "/performance",
    response_model=PerformanceResponse,
    summary="Last response time, memory usage and thread count",
)
async def performance_report() -> PerformanceResponse:
    return PerformanceResponse(
        time=format_elapsed(_last_response_time_ms),
        memory=f"{memory_mb():.2f} MB",
        threads=threading.active_count(),
    )
