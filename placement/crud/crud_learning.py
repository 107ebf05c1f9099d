from typing import List

from placement.schemas.AnalysisSchemas import LearningSuggestionRecord, ResumeLearningSuggestion
from placement.schemas.documents import LearningSuggestionDoc


class LearningSuggestionStore:
    async def add(self, student_id: str, suggestion: ResumeLearningSuggestion) -> LearningSuggestionRecord:
        doc = LearningSuggestionDoc(studentId=student_id, **suggestion.model_dump())
        await doc.insert()
        return LearningSuggestionRecord.model_validate(doc.model_dump())

    async def list_for_student(self, student_id: str) -> List[LearningSuggestionRecord]:
        docs = await LearningSuggestionDoc.find(LearningSuggestionDoc.studentId == student_id).to_list()
        return [LearningSuggestionRecord.model_validate(d.model_dump()) for d in docs]
