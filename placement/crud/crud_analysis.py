from typing import List, Optional

from pymongo import DESCENDING

from placement.schemas.AnalysisSchemas import ResumeAnalysisFields, StoredResumeAnalysis
from placement.schemas.documents import ResumeAnalysisDoc

NEWEST_FIRST = [("analyzedAt", DESCENDING), ("_id", DESCENDING)]


def _to_model(doc: Optional[ResumeAnalysisDoc]) -> Optional[StoredResumeAnalysis]:
    if doc is None:
        return None
    return StoredResumeAnalysis.model_validate(doc.model_dump())


class AnalysisStore:
    """Append-only store of resume analyses. Records are never updated or deleted."""

    async def save(self, fields: ResumeAnalysisFields) -> StoredResumeAnalysis:
        doc = ResumeAnalysisDoc(**fields.model_dump())
        await doc.insert()
        return _to_model(doc)

    async def get_by_id(self, analysis_id: str) -> Optional[StoredResumeAnalysis]:
        return _to_model(await ResumeAnalysisDoc.get(analysis_id))

    async def get_latest(self, student_id: str) -> Optional[StoredResumeAnalysis]:
        doc = await ResumeAnalysisDoc.find(ResumeAnalysisDoc.studentId == student_id).sort(NEWEST_FIRST).first_or_none()
        return _to_model(doc)

    async def get_by_file_id(self, resume_file_id: str) -> Optional[StoredResumeAnalysis]:
        doc = await ResumeAnalysisDoc.find(ResumeAnalysisDoc.resumeFileId == resume_file_id).sort(NEWEST_FIRST).first_or_none()
        return _to_model(doc)

    async def list_for_student(self, student_id: str, skip: int = 0, limit: int = 100) -> List[StoredResumeAnalysis]:
        docs = await ResumeAnalysisDoc.find(ResumeAnalysisDoc.studentId == student_id).sort(NEWEST_FIRST).skip(skip).limit(limit).to_list()
        return [_to_model(d) for d in docs]
