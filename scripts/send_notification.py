"""Utility script to emit notifications from the command line."""

from __future__ import annotations

import argparse

from sqlalchemy.exc import SQLAlchemyError

from app.application.use_cases.notifications import (
    create_notifications_for_users,
    notify_payment,
    notify_service_request,
)
from app.domain.entities import NOTIFICATION_TYPES, NotificationTemplate
from app.infrastructure.database import SessionLocal, initialize_database


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""

    parser = argparse.ArgumentParser(
        description="Create notifications for marketplace users.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    service_request = subparsers.add_parser(
        "service-request", help="Notify a user about a service request event"
    )
    service_request.add_argument("--id", type=int, required=True, help="Service request id")
    service_request.add_argument("--user", type=int, required=True, help="Recipient user id")
    service_request.add_argument("--action", required=True, help="e.g. created, new_bid, completed")

    payment = subparsers.add_parser("payment", help="Notify a user about a payment event")
    payment.add_argument("--id", type=int, required=True, help="Payment id")
    payment.add_argument("--user", type=int, required=True, help="Recipient user id")
    payment.add_argument("--action", required=True, help="e.g. created, completed, refunded")

    broadcast = subparsers.add_parser("broadcast", help="Send the same message to several users")
    broadcast.add_argument("--users", type=int, nargs="+", required=True, help="Recipient user ids")
    broadcast.add_argument("--title", required=True)
    broadcast.add_argument("--message", required=True)
    broadcast.add_argument("--type", default="info", choices=sorted(NOTIFICATION_TYPES))
    return parser.parse_args()


def main() -> None:
    """Create the requested notifications and report what was stored."""

    args = parse_args()
    initialize_database()

    session = SessionLocal()
    try:
        if args.command == "broadcast":
            result = create_notifications_for_users(
                session,
                args.users,
                NotificationTemplate(title=args.title, message=args.message, type=args.type),
            )
            for item in result.items:
                outcome = f"notification {item.notification.id}" if item.succeeded else item.error
                print(f"  user {item.user_id}: {outcome}")
            if result.failed_user_ids:
                raise SystemExit(1)
            return

        if args.command == "service-request":
            notification = notify_service_request(
                session, service_request_id=args.id, user_id=args.user, action=args.action
            )
        else:
            notification = notify_payment(
                session, payment_id=args.id, user_id=args.user, action=args.action
            )
    except SQLAlchemyError as exc:
        session.rollback()
        raise SystemExit(f"Database error while creating notifications: {exc}") from exc
    finally:
        session.close()

    if notification is None:
        raise SystemExit("No notification was produced (see log for details).")
    print(f"Created notification {notification.id}: {notification.title}")


if __name__ == "__main__":
    main()
