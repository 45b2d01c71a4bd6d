"""Example: drive the service layer directly (no Flask).

Controllers are a thin JSON shell; the rules live in the services.
"""

from production_tracker.config import testing
from production_tracker.container import build_container


def main():
    container = build_container(testing)
    try:
        admin = container.auth_service.login("admin", "password123")

        container.off_day_service.add_off_day(admin, date="2026-05-01", description="Labour Day")
        entry = container.production_service.create_plan(
            admin,
            date="2026-04-30",
            category="Healthcare",
            process="Mixing",
            product_name="Vitamin C",
            plan_quantity=800,
        )
        container.production_service.record_actual(admin, entry.entry_id, actual_quantity=760, manpower=5)

        print(container.analytics_service.dashboard("Healthcare", "2026-04"))
        print(container.analytics_service.stats())
        for log in container.storage.get_logs():
            print(log.timestamp, log.action, log.details)
    finally:
        container.close()


if __name__ == "__main__":
    main()
