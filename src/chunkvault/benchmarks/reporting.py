"""Shared utilities for benchmark reporting."""

import json
import platform
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

try:
    import psutil
except ImportError:
    psutil = None


def collect_hardware_info() -> Dict[str, Any]:
    """Collect hardware and system information."""
    info = {
        "os": f"{platform.system()} {platform.release()}",
        "python": platform.python_version(),
        "cpu": platform.processor() or platform.machine() or "unknown",
    }

    # RAM info (if psutil available)
    if psutil:
        info["ram_gb"] = round(psutil.virtual_memory().total / (1024**3), 2)
    else:
        info["ram_gb"] = None

    return info


def write_json_report(
    report_path: Path,
    suite_name: str,
    metrics: Dict[str, Any],
    config: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Write benchmark JSON report.

    Args:
        report_path: Path to write JSON report
        suite_name: Name of benchmark suite
        metrics: Benchmark metrics
        config: Configuration used (bloom size, k, hash mode, ...)
    """
    report = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "suite": suite_name,
        "hardware": collect_hardware_info(),
        "metrics": metrics,
    }

    if config:
        report["config"] = config

    with open(report_path, "w") as f:
        json.dump(report, f, indent=2)
