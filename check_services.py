#!/usr/bin/env python3
"""Verify that the configured geocoding and routing services are reachable."""

import asyncio
import sys
from pathlib import Path

# Add src to path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root / "src"))

from geodist.config import settings
from geodist.services.cache import SessionCache
from geodist.services.geocoding import Geocoder
from geodist.services.routing import Router, check_health


async def run_checks() -> int:
    print("=" * 60)
    print("Geocoding / Routing Connection Test")
    print("=" * 60)
    print()

    print("1. Configuration...")
    print(f"   [OK] Geocoding URL: {settings.nominatim_base_url}")
    print(f"   [OK] OSRM URL: {settings.osrm_base_url} (profile: {settings.osrm_profile})")
    print()

    print("2. Testing OSRM health check...")
    if not await check_health():
        print("   [ERROR] OSRM service is not responding")
        return 1
    print("   [OK] OSRM service is healthy and accessible!")
    print()

    cache = SessionCache()
    print("3. Testing geocoding lookup...")
    geocoder = Geocoder(cache.geocodes)
    delhi = await geocoder.geocode("Delhi, India")
    agra = await geocoder.geocode("Agra, India")
    if delhi is None or agra is None:
        print("   [ERROR] Geocoding lookup failed")
        return 1
    print(f"   [OK] Delhi -> {delhi.lat:.4f}, {delhi.lon:.4f}")
    print(f"   [OK] Agra -> {agra.lat:.4f}, {agra.lon:.4f}")
    print()

    print("4. Testing road route request...")
    summary = await Router(cache.routes).route(delhi.lat, delhi.lon, agra.lat, agra.lon)
    if summary is None:
        print("   [ERROR] Road route not available")
        return 1
    print(f"   [OK] Road distance: {summary.distance_km:.2f} km, {summary.duration_min:.0f} minutes")
    print()

    print("=" * 60)
    print("[SUCCESS] Geocoding and routing services are working!")
    print("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(run_checks()))
