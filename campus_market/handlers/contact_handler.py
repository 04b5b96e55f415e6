from __future__ import annotations

from fastapi import APIRouter, Depends

from campus_market.models import ContactSubmission, ContactSubmissionCreate
from campus_market.services.contact import ContactService
from campus_market.services.datastore import DataStore, get_datastore

router = APIRouter(tags=["contact"])


@router.post("/contact", response_model=ContactSubmission, status_code=201)
def submit_contact(data: ContactSubmissionCreate, store: DataStore = Depends(get_datastore)):
    return ContactService(store).submit(data)
