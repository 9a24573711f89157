"""
Generate a gateway JWT secret, or mint a bearer token for local testing.

Usage:
    python3 scripts/generate_dev_token.py --secret
    python3 scripts/generate_dev_token.py --sub seller_123
    python3 scripts/generate_dev_token.py --sub seller_123 --hours 2 --jwt-secret <secret>

Output:
    JWT_SECRET (put in .env):           <random urlsafe string>
    Bearer token (Authorization header): Bearer eyJ...
"""

import argparse
import secrets
import time

import jwt


def generate_secret() -> str:
    return secrets.token_urlsafe(48)


def mint_token(sub: str, jwt_secret: str, hours: float = 24.0) -> str:
    """HS256 token accepted by the gateway's auth dependencies."""
    now = int(time.time())
    payload = {"sub": sub, "iat": now, "exp": now + int(hours * 3600)}
    return jwt.encode(payload, jwt_secret, algorithm="HS256")


def main() -> None:
    parser = argparse.ArgumentParser(description="Gateway JWT helper")
    parser.add_argument("--secret", action="store_true", help="Print a new JWT_SECRET")
    parser.add_argument("--sub", help="Subject (seller id) for a bearer token")
    parser.add_argument("--hours", type=float, default=24.0, help="Token lifetime (default: 24)")
    parser.add_argument(
        "--jwt-secret",
        help="Signing secret (default: JWT_SECRET from the gateway settings)",
    )
    args = parser.parse_args()

    if args.secret or not args.sub:
        print(f"\nJWT_SECRET (put in .env):\n  {generate_secret()}\n")
        if not args.sub:
            return

    jwt_secret = args.jwt_secret
    if jwt_secret is None:
        from app.config import settings

        jwt_secret = settings.jwt_secret

    token = mint_token(args.sub, jwt_secret, hours=args.hours)
    print(f"\nBearer token (Authorization header):\n  Bearer {token}\n")


if __name__ == "__main__":
    main()
