from typing import Optional

from placement.schemas.AnalysisSchemas import ImprovedResumeFields, ImprovedResumeRecord
from placement.schemas.documents import ImprovedResumeDoc


class ImprovedResumeStore:
    async def save(self, fields: ImprovedResumeFields) -> ImprovedResumeRecord:
        doc = ImprovedResumeDoc(**fields.model_dump())
        await doc.insert()
        return ImprovedResumeRecord.model_validate(doc.model_dump())

    async def get_by_id(self, improved_id: str) -> Optional[ImprovedResumeRecord]:
        doc = await ImprovedResumeDoc.get(improved_id)
        return ImprovedResumeRecord.model_validate(doc.model_dump()) if doc else None
