"""Create tables and seed accounts, groups and categories for local use.

User and group management is out of scope for the API, so this script is how
a development database gets administrators, moderators and categories.

Example:
    python -m agora_stage.scripts.seed init
    python -m agora_stage.scripts.seed migrate
    python -m agora_stage.scripts.seed user alice --group administrators
    python -m agora_stage.scripts.seed category "Help" --moderator 2
    python -m agora_stage.scripts.seed token 1
"""
from __future__ import annotations

import argparse
import sys

from sqlalchemy.exc import SQLAlchemyError

from agora_stage.core.security import create_access_token
from agora_stage.db.session import SessionLocal, create_tables
from agora_stage.scripts.migrate import run_upgrade_head
from agora_stage.models import Category, CategoryModerator, GroupMembership, User


def add_user(username: str, groups: list[str], signature: str = "") -> int:
    """Insert a user, join it to ``groups`` and return its uid."""
    with SessionLocal() as db:
        user = User(username=username, signature=signature)
        db.add(user)
        db.flush()
        for group in groups:
            db.add(GroupMembership(group_name=group, uid=user.uid))
        db.commit()
        return user.uid


def add_category(name: str, parent_cid: int | None, moderators: list[int]) -> int:
    """Insert a category with its moderators and return its cid."""
    with SessionLocal() as db:
        category = Category(name=name, parent_cid=parent_cid)
        db.add(category)
        db.flush()
        for uid in moderators:
            db.add(CategoryModerator(cid=category.cid, uid=uid))
        db.commit()
        return category.cid


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the configured Agora database")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init", help="Create all tables")
    sub.add_parser("migrate", help="Apply Alembic migrations up to head")

    user_cmd = sub.add_parser("user", help="Create a user")
    user_cmd.add_argument("username")
    user_cmd.add_argument("--group", action="append", default=[], help="Group to join")
    user_cmd.add_argument("--signature", default="")

    category_cmd = sub.add_parser("category", help="Create a category")
    category_cmd.add_argument("name")
    category_cmd.add_argument("--parent", type=int, default=None, help="Parent cid")
    category_cmd.add_argument("--moderator", type=int, action="append", default=[])

    token_cmd = sub.add_parser("token", help="Print a bearer token for a uid")
    token_cmd.add_argument("uid", type=int)

    args = parser.parse_args()
    try:
        if args.command == "init":
            create_tables()
            print("[seed] tables created")
        elif args.command == "migrate":
            run_upgrade_head()
            print("[seed] migrated to head")
        elif args.command == "user":
            print(f"[seed] uid={add_user(args.username, args.group, args.signature)}")
        elif args.command == "category":
            print(f"[seed] cid={add_category(args.name, args.parent, args.moderator)}")
        elif args.command == "token":
            print(create_access_token(args.uid))
    except SQLAlchemyError as exc:
        print(f"[seed] ERROR: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
