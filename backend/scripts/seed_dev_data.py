import argparse
import json
from uuid import uuid4

from loguru import logger

from lovemarket import crud
from lovemarket.core.config import get_settings
from lovemarket.db import init_db, session_scope


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed the love system account and demo profiles")
    parser.add_argument(
        "--system-balance",
        type=float,
        default=1_000_000,
        help="Balance granted to the love system account",
    )
    parser.add_argument(
        "--user",
        action="append",
        default=None,
        metavar="USERNAME",
        help="Demo user with a love profile to create (repeatable)",
    )
    parser.add_argument(
        "--user-balance",
        type=float,
        default=1000,
        help="Balance granted to each demo user",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    settings = get_settings()
    init_db()

    created: list[dict[str, str]] = []
    with session_scope() as session:
        system = crud.upsert_user(
            session,
            user_id=settings.love_user_id,
            username="ManifoldLove",
            name="Manifold Love",
            balance=args.system_balance,
        )
        crud.ensure_private_user(session, system.id)
        created.append({"id": system.id, "username": system.username})

        for username in args.user or []:
            existing = crud.get_user_by_username(session, username)
            user = crud.upsert_user(
                session,
                user_id=existing.id if existing else uuid4().hex,
                username=username,
                name=username.capitalize(),
                balance=args.user_balance,
            )
            crud.ensure_private_user(session, user.id)
            crud.ensure_lover(session, user.id)
            logger.info("Seeded {} ({})", user.username, user.id)
            created.append({"id": user.id, "username": user.username})

    print(json.dumps(created, indent=2))


if __name__ == "__main__":
    main()
