"""Command-line entry point for Volunteer Match."""
import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from pydantic import ValidationError

from config.settings import settings
from src.logging_config import setup_logging
from src.matching.match_scorer import MatchScoreResult, calculate_match_score
from src.onboarding.validators import OpportunityForm, VolunteerProfileForm, load_yaml_form
from src.persistence.database import get_session, init_db
from src.tracking.application_service import ApplicationService
from src.tracking.exceptions import TrackingError
from src.tracking.opportunity_service import OpportunityService

logger = logging.getLogger(__name__)


def format_result(result: MatchScoreResult) -> str:
    """Render a match result as a short text block."""
    lines = [f"Match score: {result.total_score} ({result.label})"]
    for name, value in result.breakdown.as_dict().items():
        lines.append(f"  {name:<16} {value:6.2f}")
    for recommendation in result.recommendations:
        lines.append(f"- {recommendation}")
    return "\n".join(lines)


def cmd_init_db(args: argparse.Namespace) -> int:
    init_db()
    return 0


def cmd_score(args: argparse.Namespace) -> int:
    """Score a volunteer YAML against an opportunity YAML without a database."""
    volunteer = load_yaml_form(args.volunteer, VolunteerProfileForm)
    opportunity = load_yaml_form(args.opportunity, OpportunityForm)

    result = calculate_match_score(
        volunteer.to_profile(), opportunity.to_record(ngo_id=args.ngo_id)
    )
    print(format_result(result))
    return 0


def cmd_rank(args: argparse.Namespace) -> int:
    with get_session() as session:
        service = OpportunityService(session)
        ranked = service.rank_for_volunteer(args.volunteer_id, limit=args.limit)
        for item in ranked[: args.top]:
            print(f"{item.score:3d}  {item.label:<6}  {item.opportunity.title}  [{item.opportunity.id}]")
        if not ranked:
            print("No matching opportunities.")
    return 0


def cmd_apply(args: argparse.Namespace) -> int:
    with get_session() as session:
        service = ApplicationService(session)
        application = service.create_application(
            args.volunteer_id, args.opportunity_id, message=args.message
        )
        print(f"Application {application.id}: {application.status}, score {application.match_score}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="volunteer-match",
        description="Match volunteers with opportunities",
    )
    parser.add_argument("--log-level", default=settings.log_level)
    subparsers = parser.add_subparsers(dest="command", required=True)

    init = subparsers.add_parser("init-db", help="Create database tables")
    init.set_defaults(func=cmd_init_db)

    score = subparsers.add_parser("score", help="Score a volunteer YAML against an opportunity YAML")
    score.add_argument("volunteer", type=Path)
    score.add_argument("opportunity", type=Path)
    score.add_argument("--ngo-id", default="", help="Issuer id of the opportunity")
    score.set_defaults(func=cmd_score)

    rank = subparsers.add_parser("rank", help="Rank active opportunities for a volunteer")
    rank.add_argument("volunteer_id")
    rank.add_argument("--limit", type=int, default=None, help="Active opportunities to score")
    rank.add_argument("--top", type=int, default=10)
    rank.set_defaults(func=cmd_rank)

    apply = subparsers.add_parser("apply", help="Submit an application")
    apply.add_argument("volunteer_id")
    apply.add_argument("opportunity_id")
    apply.add_argument("--message", default=None)
    apply.set_defaults(func=cmd_apply)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level, settings.log_file)

    try:
        return args.func(args)
    except ValidationError as e:
        logger.error("Invalid input: %s", e)
        return 2
    except TrackingError as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
