"""
Signup Load Simulation

Fires concurrent owner signups against a running server, then has staff
join every created restaurant concurrently, and reports restaurant code
uniqueness and partial-failure counts.

Run from project root: python scripts/simulate.py --restaurants 20 --staff 5
"""

import argparse
import asyncio
import random
import sys
import time
import uuid
from datetime import datetime
from typing import Any

import httpx

API_URL = "http://localhost:4000/graphql"
TOTAL_RESTAURANTS = 20
STAFF_PER_RESTAURANT = 5

FIRST_NAMES = ["John", "Jane", "Mike", "Sarah", "Tom", "Emma", "David", "Lisa", "Chris", "Amy"]
LAST_NAMES = ["Smith", "Johnson", "Williams", "Brown", "Jones", "Garcia", "Miller", "Davis"]
RESTAURANT_WORDS = ["Pizza", "Sushi", "Taco", "Burger", "Noodle", "Curry", "Grill", "Bistro"]
STREETS = ["Main St", "Broadway", "5th Avenue", "Park Ave", "Madison Ave", "Lexington Ave"]

CREATE_RESTAURANT = """
mutation Create($input: CreateRestaurantInput!) {
    createRestaurant(input: $input) {
        success message restaurantCode accountCreated emailSent
    }
}
"""

JOIN_RESTAURANT = """
mutation Join($input: JoinRestaurantInput!) {
    joinRestaurant(input: $input) {
        success message accountCreated errorCode
    }
}
"""


def random_person() -> tuple[str, str]:
    name = f"{random.choice(FIRST_NAMES)} {random.choice(LAST_NAMES)}"
    email = f"{name.split()[0].lower()}.{uuid.uuid4().hex[:8]}@example.com"
    return name, email


def generate_owner_input() -> dict[str, str]:
    name, email = random_person()
    return {
        "name": f"{random.choice(RESTAURANT_WORDS)} {random.choice(RESTAURANT_WORDS)}",
        "address": f"{random.randint(1, 999)} {random.choice(STREETS)}",
        "phone": f"555-{random.randint(100, 999)}-{random.randint(1000, 9999)}",
        "managerEmail": email,
        "managerName": name,
        "managerPassword": "password123",
    }


def generate_staff_input(restaurant_code: str) -> dict[str, str]:
    name, email = random_person()
    return {
        "restaurantCode": restaurant_code,
        "name": name,
        "email": email,
        "password": "password123",
        "jobType": random.choice(["CHEF", "WAITER"]),
    }


async def call(
    client: httpx.AsyncClient,
    url: str,
    query: str,
    variables: dict[str, Any],
    field: str,
) -> dict[str, Any]:
    """Run one GraphQL operation and time it."""
    start_time = time.time()
    try:
        response = await client.post(url, json={"query": query, "variables": variables})
        response.raise_for_status()
        body = response.json()
    except (httpx.HTTPError, ValueError) as e:
        return {"success": False, "error": str(e)[:100], "time": round(time.time() - start_time, 3)}

    elapsed = round(time.time() - start_time, 3)
    if body.get("errors"):
        return {"success": False, "error": body["errors"][0]["message"][:100], "time": elapsed}

    return {**body["data"][field], "time": elapsed}


def print_timings(label: str, results: list[dict[str, Any]]) -> None:
    successful = [r for r in results if r["success"]]
    print(f"\n{label}: {len(successful)}/{len(results)} successful")
    if successful:
        times = [r["time"] for r in successful]
        print(f"   Average Response: {round(sum(times) / len(times), 3)}s")
        print(f"   Fastest: {min(times)}s  Slowest: {max(times)}s")

    accounts_missing = [r for r in successful if not r.get("accountCreated")]
    if accounts_missing:
        print(f"   Needs account reconciliation: {len(accounts_missing)}")

    failed = [r for r in results if not r["success"]]
    for f in failed[:5]:
        print(f"   Failed: {f.get('error') or f.get('message')}")


async def run_simulation(
    url: str = API_URL,
    num_restaurants: int = TOTAL_RESTAURANTS,
    staff_per_restaurant: int = STAFF_PER_RESTAURANT,
) -> dict[str, Any]:
    print("=" * 70)
    print("SIGNUP SIMULATION - CONCURRENT OWNERS AND STAFF")
    print("=" * 70)
    print(f"Restaurants: {num_restaurants}")
    print(f"Staff per restaurant: {staff_per_restaurant}")
    print(f"Target: {url}")
    print(f"Started: {datetime.now().strftime('%H:%M:%S')}")
    print("=" * 70)

    start_time = time.time()

    async with httpx.AsyncClient(timeout=30.0) as client:
        owners = await asyncio.gather(*[
            call(client, url, CREATE_RESTAURANT, {"input": generate_owner_input()}, "createRestaurant")
            for _ in range(num_restaurants)
        ])

        codes = [o["restaurantCode"] for o in owners if o["success"]]
        staff = await asyncio.gather(*[
            call(client, url, JOIN_RESTAURANT, {"input": generate_staff_input(code)}, "joinRestaurant")
            for code in codes
            for _ in range(staff_per_restaurant)
        ])

    total_time = round(time.time() - start_time, 2)

    print("\n" + "=" * 70)
    print("SIMULATION RESULTS")
    print("=" * 70)
    print_timings("Owner signups", owners)
    print_timings("Staff joins", staff)

    duplicates = len(codes) - len(set(codes))
    print(f"\nRestaurant codes issued: {len(codes)} (duplicates: {duplicates})")
    print(f"Total Time: {total_time}s")
    print("=" * 70)

    return {
        "owners": owners,
        "staff": staff,
        "duplicate_codes": duplicates,
        "total_time": total_time,
    }


async def check_health(url: str) -> bool:
    health_url = url.rsplit("/graphql", 1)[0] + "/health"
    async with httpx.AsyncClient(timeout=10.0) as client:
        try:
            response = await client.get(health_url)
        except httpx.HTTPError as e:
            print(f"Health check failed: {e}")
            return False

    data = response.json()
    print(f"Status: {data.get('status')}")
    print(f"   Database: {data.get('database')}")
    print(f"   Identity Provider: {data.get('identity_provider')}")
    print(f"   Notification Service: {data.get('notification_service')}")
    return response.status_code == 200


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Signup Load Simulation")
    parser.add_argument("--url", default=API_URL, help="GraphQL endpoint")
    parser.add_argument("--restaurants", type=int, default=TOTAL_RESTAURANTS)
    parser.add_argument("--staff", type=int, default=STAFF_PER_RESTAURANT)
    parser.add_argument("--skip-health", action="store_true", help="Skip the health check")
    args = parser.parse_args()

    if not args.skip_health and not asyncio.run(check_health(args.url)):
        print("\nPre-flight health check failed. Is the server running?")
        sys.exit(1)

    result = asyncio.run(run_simulation(args.url, args.restaurants, args.staff))
    sys.exit(1 if result["duplicate_codes"] else 0)
