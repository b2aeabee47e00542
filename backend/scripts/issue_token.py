"""
Issue Development Token Script.

Mints an access token for a user ID so the upload endpoints can be called
from curl during local development.

Run: python scripts/issue_token.py [USER_ID] [--minutes N]
"""

import argparse
import os
import sys
import uuid
from datetime import timedelta

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
load_dotenv()

from app.modules.auth.jwt import create_access_token


def main() -> None:
    parser = argparse.ArgumentParser(description="Issue a development access token")
    parser.add_argument("user_id", nargs="?", help="User UUID (random if omitted)")
    parser.add_argument("--minutes", type=int, default=60, help="Token lifetime in minutes")
    args = parser.parse_args()

    user_id = uuid.UUID(args.user_id) if args.user_id else uuid.uuid4()
    token, jti = create_access_token(user_id, timedelta(minutes=args.minutes))

    print(f"User ID: {user_id}")
    print(f"JTI:     {jti}")
    print(f"Token:   {token}")
    print()
    print(f'curl -H "Authorization: Bearer {token}" ...')


if __name__ == "__main__":
    main()
