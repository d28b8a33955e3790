#!/usr/bin/env python3
"""
Local assignment harness (no HTTP server).

Usage:
  python3 scripts/assign_local.py BK-7845
  python3 scripts/assign_local.py BK-7845 --pick PRO-002 --start
  python3 scripts/assign_local.py BK-7846 --cancel "Customer rescheduled"
  python3 scripts/assign_local.py BK-7845 --fail-primary

What it does:
- Loads the booking through the configured repository (in-memory demo data in dev)
- Opens an assignment interaction and prints the candidates and where they came from
- Selects a candidate (first available unless --pick is given) and commits
- Optionally starts the service or cancels the booking afterwards
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from washdesk.application.exceptions import WashdeskError
from washdesk.application.use_cases.assignment_workflow import CommitStatus
from washdesk.domain.entities.booking import Booking
from washdesk.infrastructure.backend.memory_repository import InMemoryBookingRepository
from washdesk.wiring.dependencies import get_assignment_controller, get_booking_repository


def _print_booking(booking: Booking) -> None:
    professional = booking.professional.name if booking.professional else "-"
    print(f"booking {booking.id}: status={booking.status.value} professional={professional}")
    if booking.cancellation_reason:
        print(f"  cancelled: {booking.cancellation_reason}")


async def _run(args: argparse.Namespace) -> int:
    repository = get_booking_repository()
    if args.fail_primary:
        if not isinstance(repository, InMemoryBookingRepository):
            print("--fail-primary only works against the in-memory repository")
            return 2
        repository.fail_operation("get_available_professionals")

    controller = get_assignment_controller()
    try:
        _print_booking(await controller.load_booking(args.booking_id))

        if args.cancel is not None:
            _print_booking(await controller.cancel_booking(args.booking_id, args.cancel))
            return 0

        interaction = await controller.open(args.booking_id)
        print(f"interaction: phase={interaction.phase.value} outcome={interaction.outcome.value if interaction.outcome else '-'}")
        for candidate in interaction.candidates:
            flag = "" if candidate.availability else " (unavailable)"
            print(f"  {candidate.id}  {candidate.name}  rating={candidate.rating:g}  [{candidate.source.value}]{flag}")
        if not interaction.candidates:
            print("no professionals to assign")
            return 1

        pick = args.pick or next(
            (c.id for c in interaction.candidates if c.availability),
            interaction.candidates[0].id,
        )
        if not controller.select(pick):
            print(f"{pick} is not one of the candidates")
            return 1

        result = await controller.commit()
        print(f"commit: {result.status.value}")
        if result.status is not CommitStatus.COMMITTED:
            print(f"  error: {result.error}")
            return 1
        _print_booking(result.booking)

        if args.start:
            _print_booking(await controller.start_service(args.booking_id))
        return 0
    except WashdeskError as e:
        print(f"error: {e}")
        return 1


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the professional assignment flow locally.")
    parser.add_argument("booking_id")
    parser.add_argument("--pick", help="candidate id to assign")
    parser.add_argument("--start", action="store_true", help="move the booking to ongoing after assignment")
    parser.add_argument("--cancel", metavar="REASON", help="cancel the booking instead of assigning")
    parser.add_argument("--fail-primary", action="store_true", help="simulate a failing booking-scoped lookup")
    args = parser.parse_args()
    sys.exit(asyncio.run(_run(args)))


if __name__ == "__main__":
    main()
