from __future__ import annotations

import argparse

from production_tracker.container import build_container
from production_tracker.main import load_settings


def main() -> None:
    parser = argparse.ArgumentParser(description="Create (or top up) the local store with default records.")
    parser.add_argument("--demo", action="store_true", help="also generate 30 days of demo production data")
    args = parser.parse_args()

    settings = load_settings()
    if args.demo:
        settings.AUTO_SEED_DEMO_DATA = True

    container = build_container(settings)
    try:
        storage = container.storage
        print(
            "OK: Seeded store -> "
            f"{getattr(settings, 'DATA_FILE', 'memory')} "
            f"(users={len(storage.get_users())}, off_days={len(storage.get_off_days())}, "
            f"production={len(storage.get_production_data())})"
        )
    finally:
        container.close()


if __name__ == "__main__":
    main()
