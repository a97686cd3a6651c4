#!/usr/bin/env python3
"""Check that the configured OSRM server answers route requests."""

import sys
from pathlib import Path

project_root = Path(__file__).parent
sys.path.insert(0, str(project_root / "src"))

from ridematch.config import settings
from ridematch.errors import RoutingError
from ridematch.models.route import GeoPoint
from ridematch.services.routing.osrm_client import OSRMClient, check_health, format_distance, format_duration


def main():
    print("=" * 60)
    print("OSRM Connection Check")
    print("=" * 60)
    print()

    print("1. Configuration")
    print(f"   [OK] Base URL: {settings.osrm_base_url}")
    print(f"   [OK] Profile:  {settings.osrm_profile}")
    print(f"   [OK] Timeout:  {settings.osrm_timeout_seconds:.0f}s")
    print()

    print("2. Health check")
    if not check_health():
        print("   [ERROR] OSRM service is not responding")
        return 1
    print("   [OK] OSRM service is reachable")
    print()

    print("3. Route Berlin Mitte -> Kreuzberg")
    try:
        result = OSRMClient().route([GeoPoint(52.517037, 13.388860), GeoPoint(52.496891, 13.385983)])
    except RoutingError as e:
        print(f"   [ERROR] {e.code}: {e.message} (retryable: {e.retryable})")
        return 1
    print(f"   [OK] {format_distance(result.distance_m)}, {format_duration(result.duration_s)}")
    print(f"   [OK] {len(result.geometry)} geometry points, {len(result.steps)} steps")
    for step in result.steps[:5]:
        print(f"        - {step.instruction} ({format_distance(step.distance_m)})")
    print()

    print("=" * 60)
    print("[SUCCESS] OSRM is connected and working!")
    print("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(main())
