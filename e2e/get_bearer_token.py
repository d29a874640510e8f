#!/usr/bin/env python3
"""
Get a bearer token for manual API calls.

Logs in as one of the test profiles, prints the token with curl examples,
and checks it against GET /users/profile.

Usage:
    python -m e2e.get_bearer_token                 # student
    python -m e2e.get_bearer_token --role teacher
    python -m e2e.get_bearer_token --token-only    # just the token, for scripts
"""

import contextlib
import json
import sys

from auth_client import AuthClient

from . import conftest
from .conftest import Colors
from .profiles import GUARDIAN, STUDENT, TEACHER

PROFILES = {
    'student': STUDENT,
    'teacher': TEACHER,
    'guardian': GUARDIAN,
}


def main(argv=None):
    import argparse

    parser = argparse.ArgumentParser(
        description="Log in as a test profile and print its bearer token",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m e2e.get_bearer_token
  python -m e2e.get_bearer_token --role guardian --base-url http://staging:8080/api
  TOKEN=$(python -m e2e.get_bearer_token --token-only)
        """,
    )
    parser.add_argument("--role", "-r", choices=sorted(PROFILES), default="student",
                        help="Profile to log in as (default: student)")
    parser.add_argument("--base-url", help="Override TEST_BASE_URL")
    parser.add_argument("--token-only", action="store_true", help="Print only the token")
    args = parser.parse_args(argv)

    if args.base_url:
        conftest.set_api_base(args.base_url)

    profile = PROFILES[args.role]
    if not args.token_only:
        print(f"{Colors.BOLD}🚀 GETTING BEARER TOKEN ({args.role}){Colors.END}\n")
        print("📋 Candidate accounts:")
        for cred in profile.credentials():
            print(f"- {cred.get('username') or cred.get('email')}")
        print()
        print(f"🔐 Logging in as {args.role}...")

    if args.token_only:
        with contextlib.redirect_stdout(sys.stderr):
            result = profile.login()
    else:
        result = profile.login()
    if not result.success:
        print(f"{Colors.RED}❌ Login failed: {result.error}{Colors.END}", file=sys.stderr)
        print("\n💡 Make sure that:", file=sys.stderr)
        print(f"1. The backend is running at {conftest.get_api_base()}", file=sys.stderr)
        print("2. The test users are registered in the database", file=sys.stderr)
        print("3. The credentials are correct", file=sys.stderr)
        return 1

    if args.token_only:
        print(result.token)
        return 0

    print(f"{Colors.GREEN}✅ Token obtained!{Colors.END}")
    print(f"👤 User: {json.dumps(result.user, ensure_ascii=False)}")
    print(f"⏰ Expires in: {result.expires_in} seconds\n")

    client = AuthClient(conftest.get_api_base(), timeout=conftest.TIMEOUT)
    user_id = result.user.get('id', '{id}')
    print(client.curl_examples(result.token, user_id))

    print("\n🧪 Trying an authenticated request...")
    response = client.request("GET", "/users/profile", result.token)
    if response["success"]:
        print(f"{Colors.GREEN}✅ Profile retrieved:{Colors.END}")
        print(json.dumps(response["data"], indent=2, ensure_ascii=False))
    else:
        print(f"{Colors.RED}❌ Request failed: {response['status_code']}{Colors.END}")
        print(f"Response: {response['error'] or response['data']}")

    print("\n🔑 Bearer token (for curl):")
    print("=" * 80)
    print(result.token)
    print("=" * 80)
    return 0


if __name__ == "__main__":
    sys.exit(main())
