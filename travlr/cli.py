"""travlr CLI entry point."""

from __future__ import annotations

import argparse
import asyncio
import datetime as dt
import sys

from dotenv import load_dotenv

from travlr.domain.exceptions import InvalidAgentSubset
from travlr.domain.models import BudgetHints
from travlr.orchestration.contracts import TripRequest
from travlr.orchestration.orchestrator import make_orchestrator

load_dotenv()


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="travlr", description="Plan a trip with the mock agent crew")
    parser.add_argument("--destination", required=True)
    parser.add_argument("--origin")
    parser.add_argument("--departure", required=True, type=dt.date.fromisoformat, help="YYYY-MM-DD")
    parser.add_argument("--return", dest="return_date", type=dt.date.fromisoformat, help="YYYY-MM-DD")
    parser.add_argument("--travelers", type=int, default=1)
    parser.add_argument("--currency")
    parser.add_argument("--budget", type=float, help="total budget hint")
    parser.add_argument(
        "--agents",
        help="comma-separated agent subset, e.g. accommodation,activity",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    request = TripRequest(
        destination=args.destination,
        origin=args.origin,
        departure_date=args.departure,
        return_date=args.return_date,
        travelers=args.travelers,
        currency=args.currency,
        budget=BudgetHints(total=args.budget),
    )
    subset = [a.strip() for a in args.agents.split(",") if a.strip()] if args.agents else None
    try:
        response = asyncio.run(make_orchestrator().run(request, subset))
    except InvalidAgentSubset as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    print(response.model_dump_json(indent=2))
    return 0 if response.success else 1


if __name__ == "__main__":
    sys.exit(main())
