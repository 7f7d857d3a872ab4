#!/usr/bin/env python3
"""Count people profiles of one server that have no job title."""
import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.config import config
from src.fetch.client import FetchClient
from src.jobs.scanner import scan_all_pages
from src.logging_conf import setup_logging
from src.parse.kinds import RecordKind
from src.parse.models import SourceDescriptor

MAX_LISTED = 100


def has_job_title(person: dict) -> bool:
    job_title = person.get("jobTitle")
    return isinstance(job_title, str) and job_title.strip() != ""


async def count_missing_job_titles(domain: str, page_size: int) -> None:
    """Scan all people of ``domain`` and print those without a job title."""
    source = SourceDescriptor(domain=domain, kind=RecordKind.PEOPLE)
    async with FetchClient() as client:
        first = await client.fetch_page(source, 1, 1)
        total = first.total or 0
        print(f"Total results from API: {total}")
        people = await scan_all_pages(client, source, total, page_size)

    persons = list(people.records.values())
    without = [p.get("firstName") or "(no name)" for p in persons if not has_job_title(p)]
    scanned = len(persons)
    if scanned == 0:
        print("No profiles could be listed")
        return

    print("")
    print("=== FINAL RESULTS ===")
    print(f"Total scanned:    {scanned}")
    print(f"With jobTitle:    {scanned - len(without)} ({(scanned - len(without)) * 100 / scanned:.2f}%)")
    print(f"Without jobTitle: {len(without)} ({len(without) * 100 / scanned:.2f}%)")
    if people.failed_pages:
        print(f"Pages that could not be fetched: {people.failed_pages}")

    if without:
        print("")
        print("Names without jobTitle:" if len(without) <= MAX_LISTED else f"First {MAX_LISTED} names without jobTitle:")
        for i, name in enumerate(without[:MAX_LISTED], start=1):
            print(f"  {i}. {name}")
        if len(without) > MAX_LISTED:
            print(f"  ... and {len(without) - MAX_LISTED} more")


def main():
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Count people profiles without a job title")
    parser.add_argument("--domain", default=config.MAIN_DOMAIN, help="Server to scan")
    parser.add_argument("--page-size", type=int, default=100, help="Page size (default: 100)")
    args = parser.parse_args()

    setup_logging()
    asyncio.run(count_missing_job_titles(args.domain, args.page_size))


if __name__ == "__main__":
    main()
