#!/usr/bin/env python3
"""Script to verify geocoding and OSRM connectivity."""

import sys
from pathlib import Path

# Add src to path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root / "src"))

from routemap.config import settings
from routemap.models.domain import Address
from routemap.services.geocoding.resolver import GeocodeResolver
from routemap.services.routing.osrm_client import OSRMClient, check_health


def main():
    print("=" * 60)
    print("Route Map Services Check")
    print("=" * 60)
    print()

    print("1. Checking configuration...")
    if not settings.osrm_base_url:
        print("   [ERROR] OSRM base URL is not configured")
        print("   Please set ROUTEMAP_OSRM_BASE_URL in your .env file")
        return 1
    print(f"   [OK] OSRM Base URL: {settings.osrm_base_url}")
    print(f"   [OK] OSRM Profile: {settings.osrm_profile}")
    print(f"   [OK] Geocoder: {settings.geocoder_base_url} as '{settings.geocoder_user_agent}'")
    print()

    print("2. Testing OSRM health check...")
    if not check_health():
        print("   [ERROR] OSRM service is not responding")
        return 1
    print("   [OK] OSRM service is healthy and accessible!")
    print()

    print("3. Testing itinerary request...")
    # Brussels Central to Grand Place
    itinerary = OSRMClient().calculate([(50.845500, 4.357180), (50.846777, 4.352360)])
    if itinerary is None:
        print("   [ERROR] No itinerary returned")
        return 1
    print(f"   [OK] {itinerary.distance_km} km, {itinerary.duration_min} min, {len(itinerary.coordinates)} points")
    print()

    print("4. Testing geocoding...")
    position = GeocodeResolver().resolve(Address(street="Grand Place 1", city="Brussels", postal_code="1000"))
    if position is None:
        print("   [ERROR] Address could not be geocoded")
        return 1
    print(f"   [OK] Grand Place 1, Brussels -> {position[0]:.5f}, {position[1]:.5f}")
    print()

    print("=" * 60)
    print("[SUCCESS] Geocoding and routing services are reachable!")
    print("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(main())
