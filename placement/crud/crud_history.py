from typing import List, Optional

from beanie.operators import Set
from pymongo import DESCENDING

from placement.schemas.AnalysisSchemas import ResumeHistoryEntry, ResumeHistoryFields
from placement.schemas.documents import ResumeHistoryDoc


def _to_model(doc: ResumeHistoryDoc) -> ResumeHistoryEntry:
    return ResumeHistoryEntry.model_validate(doc.model_dump())


class ResumeHistoryStore:
    async def add(self, fields: ResumeHistoryFields) -> ResumeHistoryEntry:
        """Append a version; the version number is one past the student's highest version."""
        latest = await ResumeHistoryDoc.find(ResumeHistoryDoc.studentId == fields.studentId).sort(
            [("version", DESCENDING)]
        ).first_or_none()
        version = latest.version + 1 if latest else 1
        doc = ResumeHistoryDoc(**fields.model_dump(exclude={"version"}), version=version)
        await doc.insert()
        return _to_model(doc)

    async def get_by_id(self, history_id: str) -> Optional[ResumeHistoryEntry]:
        doc = await ResumeHistoryDoc.get(history_id)
        return _to_model(doc) if doc else None

    async def list_for_student(self, student_id: str) -> List[ResumeHistoryEntry]:
        docs = await ResumeHistoryDoc.find(ResumeHistoryDoc.studentId == student_id).sort(
            [("createdAt", DESCENDING), ("version", DESCENDING)]
        ).to_list()
        return [_to_model(d) for d in docs]

    async def set_final(self, student_id: str, history_id: str) -> Optional[ResumeHistoryEntry]:
        doc = await ResumeHistoryDoc.get(history_id)
        if doc is None or doc.studentId != student_id:
            return None
        await ResumeHistoryDoc.find(ResumeHistoryDoc.studentId == student_id).update(Set({ResumeHistoryDoc.isFinal: False}))
        await doc.set({ResumeHistoryDoc.isFinal: True})
        return _to_model(doc)

    async def delete(self, student_id: str, history_id: str) -> Optional[ResumeHistoryEntry]:
        """Delete an entry owned by the student; returns the removed entry."""
        doc = await ResumeHistoryDoc.get(history_id)
        if doc is None or doc.studentId != student_id:
            return None
        entry = _to_model(doc)
        await doc.delete()
        return entry
