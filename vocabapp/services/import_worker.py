from __future__ import annotations

import logging
from typing import Optional

from sqlmodel import Session as DBSession

from vocabapp.config.settings import get_settings
from vocabapp.services.import_service import ImportJobService

logger = logging.getLogger(__name__)


class ImportWorker:
    """Drains queued import jobs oldest-first.

    Safe to run from several processes at once: each job is taken with the
    service's conditional claim, so a job is only ever run by one worker.
    """

    def __init__(self, session: DBSession, service: Optional[ImportJobService] = None) -> None:
        self.session = session
        self.service = service or ImportJobService(session)

    def process_batch(self, limit: Optional[int] = None) -> int:
        if limit is None:
            limit = get_settings().import_batch_size
        processed = 0
        while processed < limit:
            job = self.service.claim_next_queued()
            if job is None:
                break
            job_id = job.id
            try:
                self.service.run_claimed_job(job)
            except Exception:
                # Only reached when recording the failure itself failed.
                logger.exception(f"Import job {job_id} could not be finalized")
                self.session.rollback()
            processed += 1
        if processed:
            logger.info(f"Processed {processed} import job(s)")
        return processed
