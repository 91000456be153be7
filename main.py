#!/usr/bin/env python3
"""
adboard -- classified ads backend.

Usage:
  python main.py serve
  python main.py serve --host 0.0.0.0 --port 8080
  python main.py register alice
  python main.py feed
  python main.py feed --page 2 --limit 20 --sort-by price --sort-order asc
  python main.py feed --min-price 10 --max-price 500 --json

Environment variables:
  SECRET_KEY     HMAC key for access tokens (32+ chars). Required unless DEBUG=true.
  DATABASE_URL   SQLAlchemy URL. Defaults to a SQLite file next to this script.
  DEBUG          true to auto-generate a SECRET_KEY for local development.
"""

import argparse
import getpass
import json
import sys

from ads.models import DEFAULT_LIMIT, ListAdsParameters
from ads.service import AdService
from ads.store import AdStore
from auth.service import AuthService
from auth.store import UserStore
from core.config import get_settings
from core.errors import ServiceError


def _cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("asgi:app", host=args.host, port=args.port, reload=args.reload)
    return 0


def _cmd_register(args: argparse.Namespace) -> int:
    """Create an account from the terminal. The password is never echoed."""
    settings = get_settings()
    password = getpass.getpass("  Password: ")
    if getpass.getpass("  Repeat password: ") != password:
        print("  [!] Passwords do not match.")
        return 1

    users = UserStore(settings.database_url)
    try:
        service = AuthService(users, settings.secret_key, settings.token_ttl_seconds)
        user = service.register(args.login, password)
    except ServiceError as e:
        print(f"  [!] {e.detail}")
        return 1
    finally:
        users.close()

    print(f"  Registered {user.login} ({user.id}).")
    return 0


def _cmd_feed(args: argparse.Namespace) -> int:
    """Print one page of the feed, same parameters and defaults as GET /api/v1/ads."""
    settings = get_settings()
    params = ListAdsParameters(
        page=args.page,
        limit=args.limit,
        sort_by=args.sort_by,
        sort_order=args.sort_order,
        min_price=args.min_price,
        max_price=args.max_price,
    ).normalized()

    store = AdStore(settings.database_url)
    try:
        ads, total = AdService(store).list_ads(params)
    except ServiceError as e:
        print(f"  [!] {e.detail}")
        return 1
    finally:
        store.close()

    if args.json:
        print(
            json.dumps(
                {
                    "ads": [
                        {
                            "id": ad.id,
                            "user_id": ad.user_id,
                            "title": ad.title,
                            "description": ad.description,
                            "image_url": ad.image_url,
                            "price": ad.price,
                            "created_at": ad.created_at.isoformat(),
                        }
                        for ad in ads
                    ],
                    "total_count": total,
                    "page": params.page,
                    "limit": params.limit,
                },
                indent=2,
            )
        )
        return 0

    if not ads:
        print(f"\n  No ads on page {params.page} ({total} total).\n")
        return 0

    print(f"\n  Page {params.page} -- {len(ads)} of {total} ad(s)")
    print("  " + "─" * 60)
    for ad in ads:
        print(f"  {ad.price:>10.2f}  {ad.title}")
        print(f"              {ad.created_at:%Y-%m-%d %H:%M} UTC  id={ad.id}")
    print()
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="adboard",
        description="Classified ads backend: run the API or work with the store directly.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py serve --reload
  python main.py register alice
  python main.py feed --sort-by price --sort-order asc --max-price 100
        """,
    )
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    serve = sub.add_parser("serve", help="Run the HTTP API with uvicorn")
    serve.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    serve.add_argument("--port", type=int, default=8000, help="Bind port (default: 8000)")
    serve.add_argument("--reload", action="store_true", help="Restart on code changes (development only)")
    serve.set_defaults(func=_cmd_serve)

    register = sub.add_parser("register", help="Create an account (password read from the terminal)")
    register.add_argument("login", help="3-50 characters: letters, digits, underscores, hyphens")
    register.set_defaults(func=_cmd_register)

    feed = sub.add_parser("feed", help="Print one page of the ad feed")
    feed.add_argument("--page", type=int, default=1, help="1-based page number (default: 1)")
    feed.add_argument("--limit", type=int, default=DEFAULT_LIMIT, help="Page size, 1..100 (default: 10)")
    feed.add_argument(
        "--sort-by",
        choices=["created_at", "price"],
        default="",
        help="Sort column (default: created_at)",
    )
    feed.add_argument("--sort-order", choices=["asc", "desc"], default="", help="Sort direction (default: desc)")
    feed.add_argument("--min-price", type=float, default=0.0, metavar="PRICE", help="Lower price bound, 0 = none")
    feed.add_argument("--max-price", type=float, default=0.0, metavar="PRICE", help="Upper price bound, 0 = none")
    feed.add_argument("--json", action="store_true", help="Output structured JSON")
    feed.set_defaults(func=_cmd_feed)

    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 0
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
