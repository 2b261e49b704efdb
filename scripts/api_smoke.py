"""Smoke checks against a deployed visitor counter API.

Usage:
    API_ENDPOINT=https://abc123.execute-api.us-east-2.amazonaws.com python scripts/api_smoke.py
    python scripts/api_smoke.py --endpoint http://127.0.0.1:3000

Each check prints a line; the exit code is 0 only if every check passed.
Note: every run increments the live counter twice.
"""
import os
import sys
import time
import argparse
from datetime import datetime

import httpx


class CheckFailed(Exception):
    pass


def _fetch(client, path="/count"):
    r = client.get(path)
    try:
        data = r.json()
    except ValueError as e:
        raise CheckFailed(f"Failed to parse response: {e}")
    return r, data


def _parse_timestamp(value):
    # fromisoformat only accepts a trailing Z from 3.11 on
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def run_checks(client: httpx.Client, path="/count") -> bool:
    try:
        print("Test 1: API returns HTTP 200")
        r, data = _fetch(client, path)
        if r.status_code != 200:
            raise CheckFailed(f"Expected status 200, got {r.status_code}")
        print("Pass: API returned 200 OK\n")

        print("Test 2: Response contains required fields")
        for field in ("count", "message", "timestamp"):
            if field not in data or data[field] in (None, ""):
                raise CheckFailed(f"Response missing {field} field")
        print("Pass: All required fields present\n")

        print("Test 3: Count is a valid number")
        count = data["count"]
        if not isinstance(count, int) or isinstance(count, bool):
            raise CheckFailed(f"Count is not a number: {type(count).__name__}")
        if count < 0:
            raise CheckFailed(f"Count is negative: {count}")
        print(f"Pass: Count is valid number ({count})\n")

        print("Test 4: Timestamp is valid ISO 8601 format")
        try:
            first_ts = _parse_timestamp(data["timestamp"])
        except (TypeError, ValueError):
            raise CheckFailed(f"Invalid timestamp: {data['timestamp']}")
        print("Pass: Timestamp is valid\n")

        print("Test 5: Response has correct headers")
        if "application/json" not in r.headers.get("content-type", ""):
            raise CheckFailed("Content-Type is not application/json")
        print("Pass: Headers are correct\n")

        print("Test 6: Count increments on subsequent requests")
        r2, data2 = _fetch(client, path)
        if r2.status_code != 200 or data2.get("count", 0) <= count:
            raise CheckFailed("Count did not increment")
        if _parse_timestamp(data2["timestamp"]) < first_ts:
            raise CheckFailed("Timestamp went backwards")
        print(f"Pass: Count incremented ({count} to {data2['count']})\n")
    except (CheckFailed, httpx.HTTPError) as e:
        print(f"TEST FAILED: {e}", file=sys.stderr)
        return False

    print("ALL TESTS PASSED")
    print(f"Current Count: {data2['count']}")
    print(f"Timestamp: {data2['timestamp']}")
    return True


def main(argv=None):
    parser = argparse.ArgumentParser(description="Visitor counter API smoke checks")
    parser.add_argument("--endpoint", default=os.environ.get("API_ENDPOINT"))
    parser.add_argument("--path", default="/count")
    args = parser.parse_args(argv)
    if not args.endpoint:
        parser.error("--endpoint or API_ENDPOINT is required")

    start = time.time()
    with httpx.Client(base_url=args.endpoint, timeout=10.0) as client:
        ok = run_checks(client, args.path)
    print(f"Execution time: {int((time.time() - start) * 1000)}ms")
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
