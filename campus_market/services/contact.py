from __future__ import annotations

import logging
from typing import Optional

from campus_market.models import ContactStatus, ContactSubmission, ContactSubmissionCreate
from campus_market.services.datastore import DataStore
from campus_market.services.exceptions import NotFoundError
from campus_market.services.tables import CONTACT_SUBMISSIONS

logger = logging.getLogger(__name__)


class ContactService:
    """Advertising enquiries: public submission, admin follow-up."""

    def __init__(self, store: DataStore) -> None:
        self._store = store

    def submit(self, data: ContactSubmissionCreate) -> ContactSubmission:
        row = self._store.insert(
            CONTACT_SUBMISSIONS,
            {**data.model_dump(), "status": ContactStatus.PENDING.value},
        )
        logger.info("New advertising enquiry %s from %s", row["id"], data.full_name)
        return ContactSubmission.model_validate(row)

    def list(self, status: Optional[ContactStatus] = None) -> list[ContactSubmission]:
        filters = {"status": status} if status is not None else None
        rows = self._store.query(CONTACT_SUBMISSIONS, filters=filters, order_by="created_at", descending=True)
        return [ContactSubmission.model_validate(r) for r in rows]

    def set_status(self, submission_id: str, status: ContactStatus) -> ContactSubmission:
        row = self._store.update(CONTACT_SUBMISSIONS, submission_id, {"status": status.value})
        if row is None:
            raise NotFoundError(f"Submission {submission_id} not found")
        return ContactSubmission.model_validate(row)
