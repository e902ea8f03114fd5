from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import UTC, datetime, timedelta
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING, Any

from dotenv import load_dotenv

from homeplans.app import (
    assign_community_parent,
    community_children,
    community_segments,
    create_segment,
    identify_for_scrape,
    ingest_plans,
    link_community_alias,
    link_segment_alias,
    plan_price_history,
    project_community_plans,
)
from homeplans.config import configure_logging
from homeplans.domain.errors import DuplicateEntityError, EntityNotFoundError
from homeplans.domain.model import KeyType, PlanType, SegmentRole
from homeplans.domain.plan_ingest import PlanObservation
from homeplans.domain.resolution import ResolutionRequest

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from homeplans.domain.model import Community, ProductSegment, SegmentCompany

log = logging.getLogger(__name__)

EXIT_FATAL = 1
EXIT_USAGE = 2
EXIT_NOT_FOUND = 3
EXIT_CONFLICT = 4


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Resolve communities and track plan prices")
    subparsers = parser.add_subparsers(dest="command", required=True)

    identify = subparsers.add_parser(
        "identify",
        help="Resolve canonical ids and the names to scrape for a community/company pair",
    )
    identify.add_argument("--community-id", type=str, help="Canonical community id")
    identify.add_argument("--community-name", type=str, help="Community name (case-insensitive)")
    identify.add_argument("--company-id", type=str, help="Canonical company id")
    identify.add_argument("--company-name", type=str, help="Company name (case-insensitive)")
    identify.add_argument("--segment-id", type=str, help="Optional product segment id")

    plans = subparsers.add_parser("plans", help="List a community's plans with change flags")
    plans.add_argument("community_id", type=str, help="Canonical community id")
    plans.add_argument(
        "--window-hours",
        type=float,
        help="Price change window in hours (defaults to config)",
    )

    ingest = subparsers.add_parser("ingest", help="Ingest plan observations from a JSON file")
    ingest.add_argument(
        "path",
        type=Path,
        help="JSON file holding a list of plan observations",
    )

    alias = subparsers.add_parser(
        "alias",
        help="Set the name a company uses for a community",
    )
    alias.add_argument("community_id", type=str, help="Canonical community id")
    alias.add_argument("company_id", type=str, help="Canonical company id")
    alias.add_argument(
        "--name",
        type=str,
        default=None,
        help="Name used by the company (omit or leave blank to clear)",
    )

    parent = subparsers.add_parser("parent", help="Set or clear a community's parent")
    parent.add_argument("community_id", type=str, help="Canonical community id")
    parent.add_argument("--parent-id", type=str, default=None, help="Parent community id")

    children = subparsers.add_parser("children", help="List a community's child communities")
    children.add_argument("community_id", type=str, help="Canonical parent community id")

    segment_add = subparsers.add_parser("segment-add", help="Add a product segment to a community")
    segment_add.add_argument("community_id", type=str, help="Canonical community id")
    segment_add.add_argument("name", type=str, help="Segment name, unique within the community")
    segment_add.add_argument("label", type=str, help="Display label, e.g. \"40' Lots\"")
    segment_add.add_argument("--description", type=str, default=None)
    segment_add.add_argument("--display-order", type=int, default=0)
    segment_add.add_argument(
        "--inactive",
        action="store_true",
        help="Create the segment as inactive",
    )

    segments = subparsers.add_parser("segments", help="List a community's product segments")
    segments.add_argument("community_id", type=str, help="Canonical community id")
    segments.add_argument("--active-only", action="store_true", help="Hide inactive segments")

    segment_alias = subparsers.add_parser(
        "segment-alias",
        help="Configure how a company labels and selects plans for a segment",
    )
    segment_alias.add_argument("segment_id", type=str, help="Product segment id")
    segment_alias.add_argument("company_id", type=str, help="Canonical company id")
    segment_alias.add_argument(
        "--label",
        type=str,
        default=None,
        help="Segment label used by the company (omit or leave blank to clear)",
    )
    segment_alias.add_argument(
        "--role",
        type=SegmentRole,
        choices=list(SegmentRole),
        default=SegmentRole.COMPETITOR,
    )
    segment_alias.add_argument(
        "--key-type",
        type=KeyType,
        choices=list(KeyType),
        default=KeyType.PLAN_NAMES,
    )
    segment_alias.add_argument(
        "--value",
        dest="values",
        action="append",
        default=[],
        help="Selection value (repeatable)",
    )
    segment_alias.add_argument(
        "--plan-name",
        dest="plan_names",
        action="append",
        default=None,
        help="Plan name included in the segment (repeatable)",
    )
    segment_alias.add_argument("--source-community-id", type=str, default=None)
    segment_alias.add_argument("--notes", type=str, default=None)

    history = subparsers.add_parser("history", help="Show a plan's price history")
    history.add_argument("plan_id", type=str, help="Plan id")

    return parser.parse_args(list(argv))


def _parse_iso_datetime(value: str) -> datetime:
    try:
        normalized = value.strip()
        if normalized.endswith("Z"):
            normalized = normalized[:-1] + "+00:00"
        dt = datetime.fromisoformat(normalized)
    except ValueError as exc:
        raise ValueError(f"Invalid ISO timestamp: {value}") from exc
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def _window_from_args(args: argparse.Namespace) -> timedelta | None:
    if args.window_hours is None:
        return None
    if args.window_hours < 0:
        raise ValueError("Window hours must be non-negative")
    return timedelta(hours=args.window_hours)


def _observation_from_record(record: dict[str, Any]) -> PlanObservation:
    observed_at = record.get("observed_at")
    return PlanObservation(
        plan_name=record.get("plan_name"),
        price=float(record["price"]) if record.get("price") is not None else None,
        community_id=record.get("community_id"),
        community_name=record.get("community_name"),
        company_id=record.get("company_id"),
        company_name=record.get("company_name"),
        type=PlanType(record.get("type", PlanType.PLAN.value)),
        sqft=record.get("sqft"),
        stories=record.get("stories"),
        price_per_sqft=record.get("price_per_sqft"),
        beds=record.get("beds"),
        baths=record.get("baths"),
        address=record.get("address"),
        design_number=record.get("design_number"),
        segment_id=record.get("segment_id"),
        observed_at=_parse_iso_datetime(observed_at) if observed_at else None,
    )


def _load_observations(path: Path) -> list[PlanObservation]:
    payload = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(payload, list):
        raise ValueError(f"{path} must contain a JSON list of plan observations")
    return [_observation_from_record(record) for record in payload]


def _emit(payload: object) -> None:
    print(json.dumps(payload, indent=2))  # noqa: T201


def _community_payload(community: Community) -> dict[str, Any]:
    return {
        "_id": str(community.id),
        "name": community.name,
        "parentId": str(community.parent_id) if community.parent_id else None,
    }


def _segment_payload(segment: ProductSegment) -> dict[str, Any]:
    return {
        "_id": str(segment.id),
        "communityId": str(segment.community_id),
        "name": segment.name,
        "label": segment.label,
        "description": segment.description,
        "isActive": segment.is_active,
        "displayOrder": segment.display_order,
    }


def _segment_link_payload(link: SegmentCompany) -> dict[str, Any]:
    return {
        "segmentId": str(link.segment_id),
        "companyId": str(link.company_id),
        "segmentLabelAsCompany": link.segment_label_as_company,
        "role": link.role.value,
        "keyType": link.key_type.value,
        "values": list(link.values),
        "planNames": list(link.plan_names) if link.plan_names is not None else None,
        "sourceCommunityId": (
            str(link.source_community_id) if link.source_community_id else None
        ),
        "notes": link.notes,
    }


def _run(args: argparse.Namespace) -> None:  # noqa: C901, PLR0912
    if args.command == "identify":
        resolved = identify_for_scrape(
            ResolutionRequest(
                community_id=args.community_id,
                community_name=args.community_name,
                company_id=args.company_id,
                company_name=args.company_name,
                segment_id=args.segment_id,
            )
        )
        _emit(resolved.as_payload())
    elif args.command == "plans":
        views = project_community_plans(args.community_id, window=_window_from_args(args))
        _emit([view.as_payload() for view in views])
    elif args.command == "ingest":
        result = ingest_plans(_load_observations(args.path))
        _emit(
            {
                "created": result.created,
                "updated": result.updated,
                "price_changes": result.price_changes,
                "skipped": result.skipped,
                "unresolved": result.unresolved,
            }
        )
    elif args.command == "alias":
        link = link_community_alias(args.community_id, args.company_id, args.name)
        _emit(
            {
                "communityId": str(link.community_id),
                "companyId": str(link.company_id),
                "nameUsedByCompany": link.name_used_by_company,
            }
        )
    elif args.command == "parent":
        community = assign_community_parent(args.community_id, args.parent_id)
        _emit(_community_payload(community))
    elif args.command == "children":
        _emit([_community_payload(child) for child in community_children(args.community_id)])
    elif args.command == "segment-add":
        segment = create_segment(
            args.community_id,
            args.name,
            args.label,
            description=args.description,
            is_active=not args.inactive,
            display_order=args.display_order,
        )
        _emit(_segment_payload(segment))
    elif args.command == "segments":
        _emit(
            [
                _segment_payload(segment)
                for segment in community_segments(args.community_id, only_active=args.active_only)
            ]
        )
    elif args.command == "segment-alias":
        link = link_segment_alias(
            args.segment_id,
            args.company_id,
            label_as_company=args.label,
            role=args.role,
            key_type=args.key_type,
            values=args.values,
            plan_names=args.plan_names,
            source_community_id=args.source_community_id,
            notes=args.notes,
        )
        _emit(_segment_link_payload(link))
    elif args.command == "history":
        events = plan_price_history(args.plan_id)
        _emit(
            [
                {
                    "old_price": event.old_price,
                    "new_price": event.new_price,
                    "changed_at": event.changed_at.isoformat(),
                }
                for event in events
            ]
        )
    else:
        raise ValueError(f"Unsupported command: {args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        if parsed_args.command == "plans":
            _window_from_args(parsed_args)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(EXIT_USAGE)

    try:
        _run(parsed_args)
    except EntityNotFoundError as exc:
        log.error("%s", exc)  # noqa: TRY400
        sys.exit(EXIT_NOT_FOUND)
    except DuplicateEntityError as exc:
        log.error("%s", exc)  # noqa: TRY400
        sys.exit(EXIT_CONFLICT)
    except ValueError:
        log.exception("Invalid request")
        sys.exit(EXIT_USAGE)
    except Exception:
        log.exception("Fatal error")
        sys.exit(EXIT_FATAL)


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
