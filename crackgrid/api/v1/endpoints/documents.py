"""
Document link endpoints.

Analytics events are written after the response is sent; a failed write is
logged and never reported to the client.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from pydantic import BaseModel

from crackgrid.models import AnalyticsAction
from crackgrid.services.data_access import DataAccess, get_data_access, record_event_quietly
from crackgrid.services.links import embed_url


router = APIRouter(prefix="/documents", tags=["Documents"])


class PreviewUrlResponse(BaseModel):
    link: str
    preview_url: str


class DocumentEventRequest(BaseModel):
    action: AnalyticsAction = AnalyticsAction.VIEW


class DocumentEventResponse(BaseModel):
    status: str
    document_id: int
    action: AnalyticsAction


@router.get("/preview-url", response_model=PreviewUrlResponse)
def preview_url(link: str = Query(..., description="Shareable document link")):
    """Rewrite a document link into its embeddable preview form."""
    return PreviewUrlResponse(link=link, preview_url=embed_url(link))


@router.post(
    "/{document_id}/events",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=DocumentEventResponse
)
async def record_document_event(
    document_id: int,
    event: DocumentEventRequest,
    background_tasks: BackgroundTasks,
    data_access: DataAccess = Depends(get_data_access)
):
    """Queue a view/download event for a document. Always accepted."""
    background_tasks.add_task(
        record_event_quietly,
        data_access,
        event.action.value,
        document_id,
        datetime.now(timezone.utc)
    )
    return DocumentEventResponse(status="accepted", document_id=document_id, action=event.action)
