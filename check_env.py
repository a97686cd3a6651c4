#!/usr/bin/env python3
"""Check the .env file for the ride match API and create a template when missing."""

import os
import sys
from pathlib import Path

SECRET_KEYS = ("RIDEMATCH_SUPABASE_KEY", "RIDEMATCH_VAPID_PRIVATE_KEY")

TEMPLATE = """# Supabase (required for matching and notifications)
# Service role key: the trigger reads other users' watches and writes their notifications.
RIDEMATCH_SUPABASE_URL=https://your-project-id.supabase.co
RIDEMATCH_SUPABASE_KEY=your-service-role-key-here

# API
RIDEMATCH_API_PREFIX=/api
# JSON array or comma-separated list
# RIDEMATCH_FRONTEND_ALLOWED_ORIGINS=http://localhost:3000,http://127.0.0.1:3000

# Routing provider (display routes only)
RIDEMATCH_OSRM_BASE_URL=https://router.project-osrm.org
RIDEMATCH_OSRM_TIMEOUT_SECONDS=15

# Web push (generate with `vapid --gen`)
RIDEMATCH_VAPID_PUBLIC_KEY=
RIDEMATCH_VAPID_PRIVATE_KEY=
RIDEMATCH_VAPID_SUBJECT=mailto:support@example.org

# Matching thresholds in km
# RIDEMATCH_DIRECT_THRESHOLD_KM=2
# RIDEMATCH_SMALL_DETOUR_THRESHOLD_KM=20
# RIDEMATCH_DETOUR_THRESHOLD_KM=25
"""


def _masked(line: str) -> str:
    name, _, value = line.partition("=")
    value = value.strip()
    if name.strip() in SECRET_KEYS and len(value) > 20:
        return f"{name}={value[:8]}...{value[-4:]}"
    return line


def main():
    project_root = Path(__file__).parent
    env_file = project_root / ".env"

    print("=" * 60)
    print("Ride Match Environment Checker")
    print("=" * 60)
    print()

    if not env_file.exists():
        env_file.write_text(TEMPLATE, encoding="utf-8")
        print(f"❌ .env file NOT found, created template at: {env_file}")
        print("⚠️  Edit it and add your Supabase and VAPID credentials.")
        return 1

    print(f"✅ Found .env file at: {env_file}")
    print("-" * 60)
    for line in env_file.read_text(encoding="utf-8").splitlines():
        print(_masked(line))
    print("-" * 60)
    print()

    for name in ("RIDEMATCH_SUPABASE_URL", "RIDEMATCH_SUPABASE_KEY"):
        source = "environment" if os.getenv(name) else ".env / default"
        print(f"   {name}: read from {source}")
    print()

    sys.path.insert(0, str(project_root / "src"))
    try:
        from ridematch.config import settings
    except Exception as e:
        print(f"❌ Error loading config: {e}")
        return 1

    problems = []
    if not (settings.supabase_url and settings.supabase_key):
        problems.append("Supabase is NOT configured (RIDEMATCH_SUPABASE_URL / RIDEMATCH_SUPABASE_KEY)")
    if not settings.vapid_private_key:
        problems.append("VAPID private key missing: push delivery will be skipped")
    if not settings.vapid_public_key:
        problems.append("VAPID public key missing: browsers cannot subscribe to push")

    if problems:
        print("=" * 60)
        for problem in problems:
            print(f"❌ {problem}")
        print("=" * 60)
        return 1

    print("=" * 60)
    print("✅ SUCCESS: Supabase and web push are configured!")
    print("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(main())
