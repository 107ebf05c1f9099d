from datetime import datetime, timezone

from beanie import Document
from pydantic import Field
from pymongo import ASCENDING, DESCENDING, IndexModel

from .AnalysisSchemas import (
    ImprovedResumeFields,
    ResumeAnalysisFields,
    ResumeHistoryFields,
    ResumeLearningSuggestion,
    new_id,
)
from .ProfileSchemas import StudentProfile


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ResumeAnalysisDoc(Document, ResumeAnalysisFields):
    id: str = Field(default_factory=new_id)
    analyzedAt: datetime = Field(default_factory=utcnow)
    createdAt: datetime = Field(default_factory=utcnow)

    class Settings:
        name = "resume_analyses"
        indexes = [
            IndexModel([("studentId", ASCENDING), ("analyzedAt", DESCENDING)]),
            IndexModel([("resumeFileId", ASCENDING)]),
        ]


class ImprovedResumeDoc(Document, ImprovedResumeFields):
    id: str = Field(default_factory=new_id)
    createdAt: datetime = Field(default_factory=utcnow)

    class Settings:
        name = "improved_resumes"
        indexes = [IndexModel([("studentId", ASCENDING), ("createdAt", DESCENDING)])]


class ResumeHistoryDoc(Document, ResumeHistoryFields):
    id: str = Field(default_factory=new_id)
    createdAt: datetime = Field(default_factory=utcnow)

    class Settings:
        name = "resume_history"
        indexes = [IndexModel([("studentId", ASCENDING), ("createdAt", DESCENDING)])]


class LearningSuggestionDoc(Document, ResumeLearningSuggestion):
    id: str = Field(default_factory=new_id)
    studentId: str
    completed: bool = False
    createdAt: datetime = Field(default_factory=utcnow)

    class Settings:
        name = "learning_suggestions"


class StudentProfileDoc(Document, StudentProfile):
    id: str

    class Settings:
        name = "students"
