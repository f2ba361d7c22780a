"""
Dashboard snapshot — logs in as an admin and prints the dashboard stats.

Usage:
    python scripts/print_dashboard.py [email] [password]

Credentials default to the ADMIN_EMAIL / ADMIN_PASSWORD environment
variables. Needs the platform API and Redis configured as for the server.
"""

import asyncio
import os
import sys

from invest_admin.config import settings
from invest_admin.redis_client import redis
from invest_admin.services import aggregation
from invest_admin.services.list_store import store_registry
from invest_admin.services.platform_client import (
    PlatformAPIError,
    close_platform_client,
    get_platform_client,
)
from invest_admin.services.session_service import (
    NotAdminError,
    SessionExpiredError,
    SessionService,
)
from invest_admin.services.views import load_all


async def main(email: str, password: str) -> int:
    """Open a session, print one dashboard snapshot, close the session."""
    client = get_platform_client()
    service = SessionService(redis, client)

    try:
        session = await service.login(email, password)
    except (PlatformAPIError, NotAdminError, SessionExpiredError) as exc:
        print(f"Login failed: {exc}", file=sys.stderr)
        await close_platform_client()
        await redis.aclose()
        return 1

    token = session.token
    sid = session.session_id
    try:
        stores = {
            kind: store_registry.get(sid, kind)
            for kind in ("users", "withdrawals", "kyc", "plans", "transactions")
        }
        error = await load_all([
            (stores["users"], lambda: client.list_users(token)),
            (stores["withdrawals"], lambda: client.list_withdrawals(token)),
            (stores["kyc"], lambda: client.list_kyc(token)),
            (stores["plans"], lambda: client.list_plans(token)),
            (stores["transactions"], lambda: client.list_transactions(token)),
        ])
        if error:
            print(f"Dashboard unavailable: {error}", file=sys.stderr)
            return 1

        stats = aggregation.dashboard_stats(
            stores["users"].items,
            stores["withdrawals"].items,
            stores["kyc"].items,
            stores["plans"].items,
            stores["transactions"].items,
            recent_limit=settings.RECENT_ITEMS_LIMIT,
        )
        print(f"=== {settings.APP_NAME} dashboard ===")
        print(stats.model_dump_json(indent=2))
        return 0
    finally:
        await service.logout(sid)
        await close_platform_client()
        await redis.aclose()


if __name__ == "__main__":
    args = sys.argv[1:]
    email = args[0] if args else os.environ.get("ADMIN_EMAIL", "")
    password = args[1] if len(args) > 1 else os.environ.get("ADMIN_PASSWORD", "")
    if not email or not password:
        print(__doc__, file=sys.stderr)
        sys.exit(2)
    sys.exit(asyncio.run(main(email, password)))
