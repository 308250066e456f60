"""PO Note Workflows.

Anyone who can see a PO can read and add notes on it. Editing follows
the role's note edit scope: supervisors edit any note, everyone else only
their own. The author is always the principal.
"""

from pathlib import Path
from typing import List

from access import db
from access.errors import ForbiddenError, NotFoundError
from access.models import AccessOutcome, EntityType, Principal
from access.policy import can_edit_note
from access.resolver import TenantAccessResolver
from qc.errors import QCValidationError
from qc.models import NoteRecord


class NoteService:
    """Notes on purchase orders."""

    def __init__(self, resolver: TenantAccessResolver, db_path: Path):
        self.resolver = resolver
        self.db_path = db_path

    def list_notes(self, principal: Principal, po_id: str) -> List[NoteRecord]:
        self.resolver.require_access(principal, EntityType.PURCHASE_ORDER, po_id)
        return [NoteRecord(**row) for row in db.list_notes(po_id, db_path=self.db_path)]

    def create_note(self, principal: Principal, po_id: str, content: str) -> NoteRecord:
        self.resolver.require_access(principal, EntityType.PURCHASE_ORDER, po_id)
        _check_content(content)
        note_id = db.add_note(po_id, principal.user_id, content, db_path=self.db_path)
        return NoteRecord(**db.get_note(note_id, db_path=self.db_path))

    def update_note(self, principal: Principal, note_id: str, content: str) -> NoteRecord:
        """Edit a note's content.

        Raises:
            NotFoundError: Note missing, or its PO is not visible
            ForbiddenError: Missing assignment, or not the author
        """
        self._editable_note(principal, note_id, "You can only edit your own notes")
        _check_content(content)
        db.update_note_content(note_id, content, db_path=self.db_path)
        return NoteRecord(**db.get_note(note_id, db_path=self.db_path))

    def delete_note(self, principal: Principal, note_id: str) -> None:
        """Delete a note, under the same scope as editing it."""
        note = self._editable_note(principal, note_id, "You can only delete your own notes")
        db.delete_note(note["id"], db_path=self.db_path)

    def _editable_note(self, principal: Principal, note_id: str, denied_message: str):
        note = db.get_note(note_id, db_path=self.db_path)
        if note is None:
            raise NotFoundError("po_note", note_id)

        resolution = self.resolver.resolve_access(principal, EntityType.PURCHASE_ORDER, note["po_id"])
        if resolution.outcome == AccessOutcome.NOT_FOUND:
            raise NotFoundError("po_note", note_id)
        resolution.raise_for_outcome()

        if not can_edit_note(principal, note["user_id"]):
            raise ForbiddenError("po_note", note_id, message=denied_message)
        return note


def _check_content(content: str) -> None:
    if not content or not content.strip():
        raise QCValidationError("Note content must not be empty", code="EMPTY_NOTE")
