#!/usr/bin/env python3
"""Verify connectivity to the insertion advisor and the job service."""

import sys
from pathlib import Path

# Add src to path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root / "src"))

from planner.config import settings
from planner.models.domain import Stop
from planner.services.insertion.advisor_client import InsertionAdvisorClient, InsertionAdvisorError, check_health


def main():
    print("=" * 60)
    print("Insertion Advisor Connection Test")
    print("=" * 60)
    print()

    print("1. Checking configuration...")
    if not settings.advisor_base_url:
        print("   [ERROR] Advisor base URL is not configured")
        print("   Please set PLANNER_ADVISOR_BASE_URL in your .env file")
        return 1
    print(f"   [OK] Advisor Base URL: {settings.advisor_base_url}")
    print(f"   [OK] Job service URL: {settings.jobs_base_url or '(not configured)'}")
    print()

    print("2. Testing advisor health check...")
    if not check_health():
        print("   [ERROR] Insertion advisor is not responding")
        return 1
    print("   [OK] Insertion advisor is healthy and accessible!")
    print()

    print("3. Requesting suggestions for a one-stop route...")
    route = [Stop(id="probe-1", stop_order=1, customer_name="Probe", estimated_arrival="09:00", estimated_departure="09:30")]
    try:
        suggestions = InsertionAdvisorClient().calculate_insertion(
            route_stops=route,
            depot=(52.52, 13.405),
            candidate_id="probe-candidate",
            customer_id="probe-customer",
            coordinates=(52.53, 13.41),
            service_duration_minutes=30,
            date="2024-01-01",
        )
    except InsertionAdvisorError as e:
        print(f"   [ERROR] {e}")
        return 1
    print(f"   [OK] Received {len(suggestions)} position(s)")
    for suggestion in suggestions:
        print(
            f"      after #{suggestion.insert_after_index}: {suggestion.status} "
            f"(+{suggestion.delta_km:.1f} km, +{suggestion.delta_min:.0f} min)"
        )
    print()
    print("=" * 60)
    print("[SUCCESS] Insertion advisor is reachable")
    print("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(main())
