from __future__ import annotations

import sys

from production_tracker.container import build_container
from production_tracker.main import configure_logging, load_settings


def main() -> int:
    settings = load_settings()
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"), getattr(settings, "LOG_FILE", None))

    container = build_container(settings)
    try:
        report = container.storage.sync_with_remote()
    finally:
        container.close()

    if not report.enabled:
        print("SKIP: No spreadsheet endpoint configured (set SHEETS_API_URL or save one in the store)")
        return 1

    print(f"OK: Synced {', '.join(report.updated) or 'nothing'}")
    if report.skipped:
        print(f"WARN: Kept local copy of {', '.join(report.skipped)}")
    for name, count in report.rejected.items():
        print(f"WARN: Dropped {count} unreadable {name} record(s)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
