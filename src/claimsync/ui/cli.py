from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING
from uuid import UUID

from dotenv import load_dotenv

from claimsync.adapters.jsonl import read_incoming_orders, read_shipments
from claimsync.app import (
    import_orders,
    link_shipments,
    merge_customers,
    pending_matches,
    resolve_customer,
    review_match,
    score_customer,
    shipment_stats,
)
from claimsync.config import configure_logging
from claimsync.domain.model import ContactDetails

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from claimsync.domain.importing import ImportProgress

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile customers, orders and shipments")
    parser.add_argument(
        "--actor",
        type=str,
        help="User or job id recorded as the author of changes",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    identity = subparsers.add_parser("identity", help="Customer identity commands")
    identity_sub = identity.add_subparsers(dest="identity_command", required=True)

    resolve = identity_sub.add_parser("resolve", help="Find or create a customer identity")
    resolve.add_argument("--email", type=str, help="Customer email address")
    resolve.add_argument("--phone", type=str, help="Customer phone number")
    resolve.add_argument("--name", type=str, help="Customer display name")
    resolve.add_argument("--address", type=str, help="Customer address")

    merge = identity_sub.add_parser("merge", help="Merge one identity into another")
    merge.add_argument("keep_id", type=str, help="Identity that survives the merge")
    merge.add_argument("merge_id", type=str, help="Identity folded into KEEP_ID")

    pending = identity_sub.add_parser("pending", help="List matches awaiting review")
    pending.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Maximum number of matches to list (defaults to config)",
    )

    review = identity_sub.add_parser("review", help="Approve or reject a pending match")
    review.add_argument("match_id", type=str, help="Identity match id")
    decision = review.add_mutually_exclusive_group(required=True)
    decision.add_argument("--approve", action="store_true", help="Merge the two identities")
    decision.add_argument("--reject", action="store_true", help="Keep the identities apart")

    orders = subparsers.add_parser("orders", help="Order commands")
    orders_sub = orders.add_subparsers(dest="orders_command", required=True)
    orders_import = orders_sub.add_parser("import", help="Import orders from a JSON Lines file")
    orders_import.add_argument("path", type=Path, help="JSON Lines file with one order per line")
    orders_import.add_argument(
        "--batch-size",
        type=int,
        default=None,
        help="Number of orders per batch (defaults to config)",
    )

    shipments = subparsers.add_parser("shipments", help="Shipment commands")
    shipments_sub = shipments.add_subparsers(dest="shipments_command", required=True)
    shipments_link = shipments_sub.add_parser(
        "link",
        help="Link shipments from a JSON Lines file to orders",
    )
    shipments_link.add_argument(
        "path",
        type=Path,
        help="JSON Lines file with one shipment per line",
    )
    shipments_sub.add_parser("stats", help="Count orders with and without tracking numbers")

    risk = subparsers.add_parser("risk", help="Risk scoring commands")
    risk_sub = risk.add_subparsers(dest="risk_command", required=True)
    risk_score = risk_sub.add_parser("score", help="Recalculate a customer's risk score")
    risk_score.add_argument("identity_id", type=str, help="Customer identity id")
    risk_score.add_argument(
        "--email",
        type=str,
        help="Email used to look up support and marketing data (defaults to the identity's)",
    )

    return parser.parse_args(list(argv))


def _parse_uuid(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError as exc:
        raise ValueError(f"Invalid UUID: {value}") from exc


def _validate(args: argparse.Namespace) -> None:
    if args.command == "identity":
        if args.identity_command == "resolve" and not any(
            (args.email, args.phone, args.name, args.address)
        ):
            raise ValueError("Provide at least one of --email, --phone, --name, --address")
        if args.identity_command == "merge":
            _parse_uuid(args.keep_id)
            _parse_uuid(args.merge_id)
        if args.identity_command == "review":
            _parse_uuid(args.match_id)
        if args.identity_command == "pending" and args.limit is not None and args.limit <= 0:
            raise ValueError("--limit must be positive")
    if args.command == "orders" and args.batch_size is not None and args.batch_size <= 0:
        raise ValueError("--batch-size must be positive")
    has_path = args.command == "orders" or (
        args.command == "shipments" and args.shipments_command == "link"
    )
    if has_path and not args.path.is_file():
        raise ValueError(f"No such file: {args.path}")
    if args.command == "risk":
        _parse_uuid(args.identity_id)


def _log_progress(progress: ImportProgress) -> None:
    if progress.processed == progress.total or progress.processed % 50 == 0:
        log.info(
            "Imported %s/%s orders (batch %s/%s)",
            progress.processed,
            progress.total,
            progress.current_batch,
            progress.total_batches,
        )


def _run_identity(args: argparse.Namespace) -> None:
    if args.identity_command == "resolve":
        resolution = resolve_customer(
            ContactDetails(
                email=args.email,
                phone=args.phone,
                name=args.name,
                address=args.address,
            ),
            actor_id=args.actor,
        )
        log.info(
            "%s identity %s (%s)",
            "Created" if resolution.is_new else "Found",
            resolution.identity.id,
            resolution.identity.name,
        )
        for candidate in resolution.matches:
            log.info(
                "  candidate %s: %s (confidence=%s)",
                candidate.identity.id,
                candidate.reason,
                candidate.confidence,
            )
    elif args.identity_command == "merge":
        keep = merge_customers(
            _parse_uuid(args.keep_id),
            _parse_uuid(args.merge_id),
            actor_id=args.actor,
        )
        log.info("Identity %s now has %s orders", keep.id, keep.total_orders)
    elif args.identity_command == "pending":
        entries = pending_matches(limit=args.limit)
        if not entries:
            log.info("No matches awaiting review")
        for entry in entries:
            log.info(
                "%s: %s <-> %s (%s, confidence=%s)",
                entry.match.id,
                entry.identity.name,
                entry.candidate.name,
                entry.match.reason,
                entry.match.confidence,
            )
    elif args.identity_command == "review":
        match = review_match(_parse_uuid(args.match_id), approve=args.approve, actor_id=args.actor)
        log.info("Match %s is now %s", match.id, match.status)


def _run(args: argparse.Namespace) -> None:
    if args.command == "identity":
        _run_identity(args)
    elif args.command == "orders":
        result = import_orders(
            read_incoming_orders(args.path),
            actor_id=args.actor,
            batch_size=args.batch_size,
            on_progress=_log_progress,
        )
        for conflict in result.conflicts:
            log.warning(
                "Order %s needs review; conflicting fields: %s",
                conflict.order_number,
                ", ".join(conflict.field_names),
            )
    elif args.command == "shipments" and args.shipments_command == "stats":
        stats = shipment_stats()
        log.info(
            "Orders: %s total, %s with tracking, %s without",
            stats.total_orders,
            stats.with_tracking,
            stats.without_tracking,
        )
        for carrier_code, total in sorted(stats.by_carrier.items()):
            log.info("  %s: %s", carrier_code, total)
    elif args.command == "shipments":
        link_shipments(read_shipments(args.path), actor_id=args.actor)
    elif args.command == "risk":
        score = score_customer(_parse_uuid(args.identity_id), email=args.email)
        if score is None:
            raise ValueError(f"Unknown customer identity: {args.identity_id}")
        log.info(
            "Risk %s (%s), confidence %s",
            score.overall_score,
            score.level,
            score.confidence,
        )
        for recommendation in score.recommendations:
            log.info("  %s", recommendation)
    else:
        raise ValueError(f"Unsupported command: {args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args: argparse.Namespace
    try:
        parsed_args = _parse_args(args_list)
        configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)
        _validate(parsed_args)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        _run(parsed_args)
    except Exception:
        log.exception("Fatal error")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
