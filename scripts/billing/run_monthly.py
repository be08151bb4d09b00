# scripts/billing/run_monthly.py
"""
Run the payment lifecycle once against the configured store, outside the API.
Meant for cron: generates this month's payments, then marks overdue ones.

Usage:
  python scripts/billing/run_monthly.py
  python scripts/billing/run_monthly.py --date 2024-03-05 --skip-overdue
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

import argparse
import asyncio
from datetime import date

from parkdesk.services.data_service import DataService
from parkdesk.store.factory import build_store


async def run(today: date, generate: bool, mark_overdue: bool) -> int:
    store = build_store()
    service = DataService(store, auto_mark_overdue=False)
    try:
        await service.load_all()
        if service.state.error:
            print(f"Load failed: {service.state.error}")
            return 1

        if generate:
            created = await service.generate_monthly_payments(today)
            print(f"Generated {created} payment(s) for {today:%Y-%m}")
        if mark_overdue:
            updated = await service.mark_overdue_payments(today)
            print(f"Marked {updated} payment(s) overdue")
    finally:
        await store.close()

    if service.state.error:
        print(f"Last error: {service.state.error}")
        return 1
    return 0


def main():
    parser = argparse.ArgumentParser(description="Parkdesk monthly billing run")
    parser.add_argument("--date", type=date.fromisoformat, default=date.today(),
                        help="Billing date (YYYY-MM-DD), default today")
    parser.add_argument("--skip-generate", action="store_true", help="Do not create new payments")
    parser.add_argument("--skip-overdue", action="store_true", help="Do not mark overdue payments")
    args = parser.parse_args()

    sys.exit(asyncio.run(run(args.date, not args.skip_generate, not args.skip_overdue)))


if __name__ == "__main__":
    main()
