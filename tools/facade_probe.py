#!/usr/bin/env python3
"""
Datasmith Facade Native Probe

Purpose:
- Load the real native facade library through the configured path (or --library)
- Create one actor of every creatable type, parent them under a root actor
- Read every child back through the native layer and check the reconstructed wrapper type
- Dispose everything explicitly and report handle statistics and leaks

Requirements:
- A built DatasmithFacadeCSharp shared library. Location is resolved as documented in
  datasmith_facade/utils/config.py:
    DATASMITH_FACADE_LIBRARY     absolute path to the library
    DATASMITH_FACADE_ENGINE_DIR  engine directory used for the default path

Usage:
  python tools/facade_probe.py --save_report
  python tools/facade_probe.py --library /opt/ue/Engine/Binaries/Linux/libDatasmithFacadeCSharp.so --rounds 5
"""
from __future__ import annotations

import argparse
import datetime
import json
import os
import sys
import time
from typing import Any, Dict, List

# Import within repo context
sys.path.append(os.path.dirname(os.path.dirname(__file__)))

from datasmith_facade.core import (  # noqa: E402
    FacadeActor,
    FacadeError,
    NativeLibraryError,
    get_registry,
    register,
    unregister,
)
from datasmith_facade.core.factory import ACTOR_CLASSES  # noqa: E402
from datasmith_facade.utils.config import configure, get_config_dir, get_settings  # noqa: E402


def _probe_round(index: int) -> Dict[str, Any]:
    entry: Dict[str, Any] = {"round": index, "checks": []}
    root = FacadeActor(f"ProbeRoot_{index}")
    created: List[FacadeActor] = []
    try:
        for actor_type, cls in sorted(ACTOR_CLASSES.items()):
            actor = cls(f"Probe_{actor_type.name}")
            actor.set_translation(1.0 * actor_type, 2.0, 3.0)
            actor.add_tag("probe")
            root.add_child(actor)
            created.append(actor)

        for i in range(root.get_children_count()):
            expected = created[i]
            child = root.get_child(i)
            check = {
                "index": i,
                "expected": type(expected).__name__,
                "got": type(child).__name__ if child is not None else None,
            }
            if child is not None:
                check["translation_ok"] = child.get_translation() == expected.get_translation()
                check["tags"] = child.get_tags()
                child.dispose()
            check["ok"] = check["got"] == check["expected"] and check.get("translation_ok", False)
            entry["checks"].append(check)
    finally:
        for actor in created:
            actor.dispose()
        root.dispose()

    entry["ok"] = all(c["ok"] for c in entry["checks"])
    return entry


def run_probe(rounds: int, save_report: bool) -> Dict[str, Any]:
    try:
        register()
    except NativeLibraryError as ex:
        print(f"Cannot load native library: {ex}", file=sys.stderr)
        return {"error": "library_unavailable", "detail": str(ex)}

    results: List[Dict[str, Any]] = []
    t0 = time.perf_counter()
    for i in range(rounds):
        t_start = time.perf_counter()
        try:
            entry = _probe_round(i)
        except FacadeError as e:
            entry = {"round": i, "ok": False, "error_type": type(e).__name__, "error": str(e).splitlines()[0]}
        entry["duration_sec"] = round(time.perf_counter() - t_start, 3)
        results.append(entry)

    stats = get_registry().snapshot()
    leaks = [rec.to_dict() for rec in unregister()]

    passed = sum(1 for r in results if r.get("ok"))
    report: Dict[str, Any] = {
        "ts": time.time(),
        "ts_iso": datetime.datetime.now(datetime.timezone.utc).isoformat(),
        "library_path": get_settings().library_path,
        "rounds": rounds,
        "passed": passed,
        "total_duration_sec": round(time.perf_counter() - t0, 3),
        "handles": {
            "created": stats.created,
            "released": stats.released,
            "leaked": stats.leaked,
            "live": stats.live,
            "process_rss_mb": stats.process_rss_mb,
        },
        "leaks": leaks,
        "acceptance_met": passed == rounds and not leaks,
        "results": results,
    }

    if save_report:
        try:
            out_dir = os.path.join(get_config_dir(), "reports")
            os.makedirs(out_dir, exist_ok=True)
            ts = datetime.datetime.now(datetime.timezone.utc).strftime("%Y%m%d_%H%M%S")
            out_fp = os.path.join(out_dir, f"facade_probe_{ts}.json")
            with open(out_fp, "w", encoding="utf-8") as f:
                json.dump(report, f, indent=2)
            print(f"Saved report: {out_fp}")
        except OSError as ex:
            print(f"Warning: failed to save report: {ex}", file=sys.stderr)

    print(f"Completed {rounds} rounds, {passed} passed "
          f"({'PASS' if report['acceptance_met'] else 'FAIL'}). Total duration: {report['total_duration_sec']}s")
    return report


def main():
    ap = argparse.ArgumentParser(description="Datasmith Facade Native Probe")
    ap.add_argument("--library", type=str, default="", help="Path to the native facade library (overrides config)")
    ap.add_argument("--rounds", type=int, default=1, help="Number of build/read-back/dispose rounds")
    ap.add_argument("--save_report", action="store_true", help="Save a JSON report under the config directory")
    args = ap.parse_args()

    if args.library:
        configure(library_path=args.library)

    report = run_probe(rounds=max(1, args.rounds), save_report=args.save_report)
    sys.exit(0 if report.get("acceptance_met") else 1)


if __name__ == "__main__":
    main()
