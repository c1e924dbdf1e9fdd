#!/usr/bin/env python3
"""
Run scheduled rating maintenance jobs.

Cron entries (ladder.tasks.SCHEDULES):
    0 0 * * SUN  python scripts/run_maintenance.py --jobs weekly_decay
    0 0 1 * *    python scripts/run_maintenance.py --jobs monthly_soft_reset

Manual hard reset:
    python scripts/run_maintenance.py --jobs hard_reset

Dry run (compute changes, write nothing):
    python scripts/run_maintenance.py --jobs weekly_decay --dry-run
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
import uuid
from datetime import date, datetime
from pathlib import Path
from typing import Any

# Add src to path so this script can be run directly
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from ladder.config import settings
from ladder.db import get_engine
from ladder.tasks import JOBS, execute_job, maintenance_lock, resolve_jobs


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Run scheduled rating maintenance jobs.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--jobs",
        default=None,
        help="Comma-separated job names to run (default: all jobs enabled by default).",
    )
    parser.add_argument(
        "--skip",
        default="",
        help="Comma-separated job names to skip.",
    )
    parser.add_argument(
        "--today",
        default=None,
        help="Override today's date (YYYY-MM-DD) for decay calculations.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Compute changes but do not write to the database.",
    )
    parser.add_argument(
        "--continue-on-error",
        action="store_true",
        help="Keep running remaining jobs after a failure.",
    )
    parser.add_argument(
        "--lock-timeout-seconds",
        type=float,
        default=0.0,
        help="How long to wait for another maintenance run to finish.",
    )
    parser.add_argument(
        "--metrics-json",
        default=None,
        help="Write a JSON summary to this path on completion.",
    )
    return parser


def _write_json(path: Path, payload: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")


def main() -> int:
    args = _build_parser().parse_args()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        today = date.fromisoformat(args.today) if args.today else date.today()
    except ValueError as exc:
        print(f"ERROR: --today must be YYYY-MM-DD: {exc}")
        return 1

    include = [s.strip() for s in args.jobs.split(",") if s.strip()] if args.jobs else None
    skip = {s.strip() for s in args.skip.split(",") if s.strip()}
    try:
        job_names = resolve_jobs(include=include, skip=skip)
    except KeyError as exc:
        print(f"ERROR: {exc.args[0]} (known jobs: {', '.join(JOBS)})")
        return 1

    started_at = datetime.utcnow()
    run_id = started_at.strftime("%Y%m%dT%H%M%SZ") + "-" + uuid.uuid4().hex[:8]
    run_summary: dict[str, Any] = {
        "run_id": run_id,
        "started_at": started_at.isoformat(),
        "today": today.isoformat(),
        "dry_run": args.dry_run,
        "jobs": [],
        "status": "running",
    }

    print(f"MAINTENANCE  run={run_id}  today={today}  dry_run={args.dry_run}")
    print(f"Jobs: {job_names}")
    print("-" * 60)

    try:
        with maintenance_lock(get_engine(), timeout_seconds=args.lock_timeout_seconds):
            for name in job_names:
                outcome = execute_job(name, today, dry_run=args.dry_run)
                run_summary["jobs"].append(outcome.to_dict())
                detail = outcome.error if outcome.failed else outcome.sweep.summary()
                print(f"{name:<22} {outcome.status:<8} {outcome.elapsed_s:.2f}s  {detail}")
                if outcome.failed and not args.continue_on_error:
                    break
    except TimeoutError as exc:
        run_summary["status"] = "failed"
        run_summary["error"] = str(exc)
        run_summary["ended_at"] = datetime.utcnow().isoformat()
        if args.metrics_json:
            _write_json(Path(args.metrics_json), run_summary)
        print(f"Maintenance run failed to acquire lock: {exc}")
        return 2

    ended_at = datetime.utcnow()
    has_failed = any(job["status"] == "failed" for job in run_summary["jobs"])
    final_status = "failed" if has_failed else "success"
    run_summary["ended_at"] = ended_at.isoformat()
    run_summary["status"] = final_status
    run_summary["duration_s"] = (ended_at - started_at).total_seconds()

    if args.metrics_json:
        _write_json(Path(args.metrics_json), run_summary)

    print("-" * 60)
    print(f"Maintenance {run_id} finished with status={final_status}")
    return 1 if has_failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
