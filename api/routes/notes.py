"""PO note endpoints."""

from typing import List

from fastapi import APIRouter, Depends, Query, Response
from pydantic import BaseModel, Field

from access import Principal
from api.dependencies import get_note_service, get_principal
from qc import NoteRecord, NoteService


router = APIRouter()


class CreateNoteRequest(BaseModel):
    """New note. The author is always the caller."""
    po_id: str
    content: str = Field(..., min_length=1)


class UpdateNoteRequest(BaseModel):
    content: str = Field(..., min_length=1)


@router.get("", response_model=List[NoteRecord])
def list_notes(
    po_id: str = Query(..., description="PO to list notes for"),
    principal: Principal = Depends(get_principal),
    service: NoteService = Depends(get_note_service),
) -> List[NoteRecord]:
    return service.list_notes(principal, po_id)


@router.post("", response_model=NoteRecord, status_code=201)
def create_note(
    request: CreateNoteRequest,
    principal: Principal = Depends(get_principal),
    service: NoteService = Depends(get_note_service),
) -> NoteRecord:
    return service.create_note(principal, request.po_id, request.content)


@router.put("/{note_id}", response_model=NoteRecord)
def update_note(
    note_id: str,
    request: UpdateNoteRequest,
    principal: Principal = Depends(get_principal),
    service: NoteService = Depends(get_note_service),
) -> NoteRecord:
    return service.update_note(principal, note_id, request.content)


@router.delete("/{note_id}", status_code=204)
def delete_note(
    note_id: str,
    principal: Principal = Depends(get_principal),
    service: NoteService = Depends(get_note_service),
) -> Response:
    service.delete_note(principal, note_id)
    return Response(status_code=204)
