#!/usr/bin/env python3
"""
Post-Deployment Health Check Script

Validates that the deployed API is up and that authentication is enforced.

Usage:
    python scripts/health_check.py --url <DEPLOYMENT_URL> --environment <staging|production>

Checks Performed:
    1. Liveness endpoint (/health) returns 200 OK with status UP
    2. Protected endpoint (/api/auth/me) returns 401 without a token
    3. Protected directory endpoint (/api/nutricionistas) rejects anonymous reads

Exit Codes:
    0: All health checks passed
    1: One or more health checks failed
"""

import argparse
import sys
import time
import requests
from typing import Dict, Tuple


def check_endpoint(url: str, endpoint: str, timeout: int = 10, expected_status: int = 200) -> Tuple[bool, str]:
    """
    Checks if an endpoint returns the expected HTTP status code.

    Returns:
        Tuple[bool, str]: (success, message)
    """
    full_url = f"{url.rstrip('/')}{endpoint}"

    try:
        response = requests.get(full_url, timeout=timeout, allow_redirects=True)

        if response.status_code == expected_status:
            return True, f"✓ {endpoint} returned {response.status_code}"
        else:
            return False, f"✗ {endpoint} returned {response.status_code} (expected {expected_status})"

    except requests.exceptions.Timeout:
        return False, f"✗ {endpoint} timed out after {timeout} seconds"
    except requests.exceptions.ConnectionError:
        return False, f"✗ {endpoint} connection failed"
    except requests.exceptions.RequestException as e:
        return False, f"✗ {endpoint} error: {str(e)}"


def check_liveness(url: str, timeout: int = 10) -> Tuple[bool, str]:
    """
    Checks the /health endpoint and verifies it reports status UP.
    """
    full_url = f"{url.rstrip('/')}/health"

    try:
        response = requests.get(full_url, timeout=timeout)

        if response.status_code != 200:
            return False, f"✗ /health returned {response.status_code}"

        try:
            data = response.json()
        except ValueError:
            return False, "✗ /health returned invalid JSON"

        status = data.get('status', 'unknown')
        if status == 'UP':
            return True, "✓ /health returned 200, status UP"
        return False, f"✗ /health status: {status}"

    except requests.exceptions.Timeout:
        return False, f"✗ /health timed out after {timeout} seconds"
    except requests.exceptions.ConnectionError:
        return False, "✗ /health connection failed"
    except requests.exceptions.RequestException as e:
        return False, f"✗ /health error: {str(e)}"


def run_health_checks(url: str, environment: str) -> Dict[str, Tuple[bool, str]]:
    """
    Runs all health checks and returns results keyed by check name.
    """
    print(f"\n{'='*60}")
    print(f"Post-Deployment Health Checks - {environment.upper()}")
    print(f"{'='*60}\n")
    print(f"Target URL: {url}\n")

    results = {}

    print("Check 1: Liveness (/health)...")
    success, message = check_liveness(url, timeout=15)
    results["liveness"] = (success, message)
    print(f"  {message}\n")

    print("Check 2: Authentication enforced (/api/auth/me)...")
    success, message = check_endpoint(url, "/api/auth/me", timeout=15, expected_status=401)
    results["auth_enforced"] = (success, message)
    print(f"  {message}\n")

    print("Check 3: Directory requires a token (/api/nutricionistas)...")
    success, message = check_endpoint(url, "/api/nutricionistas", timeout=15, expected_status=401)
    results["directory_protected"] = (success, message)
    print(f"  {message}\n")

    return results


def print_summary(results: Dict[str, Tuple[bool, str]], environment: str) -> bool:
    """
    Prints a summary of health check results.

    Returns:
        bool: True if all checks passed, False otherwise
    """
    print(f"{'='*60}")
    print(f"Health Check Summary - {environment.upper()}")
    print(f"{'='*60}\n")

    passed = sum(1 for success, _ in results.values() if success)
    total = len(results)

    for check_name, (success, _) in results.items():
        status = "PASS" if success else "FAIL"
        symbol = "✓" if success else "✗"
        print(f"{symbol} {check_name}: {status}")

    print(f"\nTotal: {passed}/{total} checks passed\n")

    if passed == total:
        print("✓ All health checks passed. Deployment is healthy.\n")
        return True
    else:
        print(f"✗ {total - passed} health check(s) failed. Investigate issues above.\n")
        return False


def main():
    parser = argparse.ArgumentParser(description="Run post-deployment health checks")
    parser.add_argument("--url", required=True, help="Deployment URL to check")
    parser.add_argument(
        "--environment",
        required=True,
        choices=["staging", "production"],
        help="Deployment environment"
    )
    parser.add_argument(
        "--retry",
        type=int,
        default=3,
        help="Number of retry attempts if checks fail (default: 3)"
    )
    parser.add_argument(
        "--retry-delay",
        type=int,
        default=10,
        help="Delay in seconds between retries (default: 10)"
    )

    args = parser.parse_args()

    for attempt in range(1, args.retry + 1):
        if attempt > 1:
            print(f"\nRetry attempt {attempt}/{args.retry}")
            time.sleep(args.retry_delay)

        results = run_health_checks(args.url, args.environment)

        if print_summary(results, args.environment):
            sys.exit(0)

    print(f"✗ HEALTH CHECKS FAILED AFTER {args.retry} ATTEMPTS", file=sys.stderr)
    sys.exit(1)


if __name__ == "__main__":
    main()
