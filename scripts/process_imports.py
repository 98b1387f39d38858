from __future__ import annotations

import argparse
import logging
from typing import List

from dotenv import load_dotenv
from sqlmodel import Session, select

from vocabapp.config.settings import get_settings
from vocabapp.db.base import get_engine, init_db
from vocabapp.db.schemas import ImportJob
from vocabapp.services.import_service import ImportJobService
from vocabapp.services.import_worker import ImportWorker


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Process queued vocabulary CSV imports. Safe to run from cron "
        "on several hosts at once."
    )
    parser.add_argument("--limit", type=int, help="Maximum number of jobs to process")
    parser.add_argument("--job-id", type=int, help="Only process a specific import job id")
    parser.add_argument("--dry-run", action="store_true", help="Only list queued jobs, do not process them")
    return parser.parse_args()


def list_queued_job_ids(session: Session, limit: int | None) -> List[int]:
    statement = select(ImportJob.id).where(ImportJob.status == "queued").order_by(ImportJob.created_at, ImportJob.id)
    if limit:
        statement = statement.limit(limit)
    return list(session.exec(statement).all())


def main() -> None:
    load_dotenv()
    args = parse_args()
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper(), format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
    init_db()
    limit = args.limit if args.limit is not None else settings.import_batch_size

    with Session(get_engine()) as session:
        if args.dry_run:
            queued = list_queued_job_ids(session, limit)
            if not queued:
                print("No queued import jobs.")
                return
            for job_id in queued:
                print(f"[DRY RUN] Would process import job #{job_id}")
            return
        if args.job_id:
            print(f"Processing import job #{args.job_id} ...", end="", flush=True)
            ImportJobService(session).process_job(args.job_id)
            job = session.get(ImportJob, args.job_id)
            print(f" {job.status if job else 'not found'}.")
            return
        processed = ImportWorker(session).process_batch(limit)
        print(f"Processed {processed} import job(s).")


if __name__ == "__main__":
    main()
