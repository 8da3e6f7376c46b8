from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query

from taskify.api.deps import get_workspace
from taskify.models.notes import NoteCreate, NoteOut, NoteUpdate
from taskify.workspace import Workspace

router = APIRouter(prefix="/notes", tags=["notes"])


@router.get("", response_model=list[NoteOut])
def list_notes(
    tag: str | None = Query(default=None, max_length=100),
    ws: Workspace = Depends(get_workspace),
) -> list[NoteOut]:
    return [NoteOut(**n.to_dict()) for n in ws.notes.list_notes(tag=tag)]


@router.post("", response_model=NoteOut, status_code=201)
def create_note(payload: NoteCreate, ws: Workspace = Depends(get_workspace)) -> NoteOut:
    try:
        note = ws.notes.create_note(**payload.model_dump())
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return NoteOut(**note.to_dict())


@router.get("/{note_id}", response_model=NoteOut)
def get_note(note_id: UUID, ws: Workspace = Depends(get_workspace)) -> NoteOut:
    note = ws.notes.get_note(str(note_id))
    if note is None:
        raise HTTPException(status_code=404, detail="Note not found")
    return NoteOut(**note.to_dict())


@router.put("/{note_id}", response_model=NoteOut)
def update_note(note_id: UUID, payload: NoteUpdate, ws: Workspace = Depends(get_workspace)) -> NoteOut:
    try:
        updated = ws.notes.update_note(str(note_id), payload.model_dump(exclude_unset=True))
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    if updated is None:
        raise HTTPException(status_code=404, detail="Note not found")
    return NoteOut(**updated.to_dict())


@router.post("/{note_id}/pin", response_model=NoteOut)
def toggle_pin(note_id: UUID, ws: Workspace = Depends(get_workspace)) -> NoteOut:
    note = ws.notes.toggle_pin(str(note_id))
    if note is None:
        raise HTTPException(status_code=404, detail="Note not found")
    return NoteOut(**note.to_dict())


@router.delete("/{note_id}", status_code=204)
def delete_note(note_id: UUID, ws: Workspace = Depends(get_workspace)) -> None:
    if not ws.notes.delete_note(str(note_id)):
        raise HTTPException(status_code=404, detail="Note not found")
    return None
