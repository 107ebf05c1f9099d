from typing import Any, Dict, List, Literal, Optional, Union
from datetime import datetime
import uuid

import pydantic
from pydantic import BaseModel, Field

from .ResumeSchemas import ExtractedResumeData, ImprovedResumeData
from .ProfileSchemas import MergedEducation, MergedExperience, MergedProject, MergedSkill

SuggestionType = Literal["improvement", "keyword", "format", "content", "missing"]
Priority = Literal["high", "medium", "low"]
LearningType = Literal["concept", "tool", "practice"]
AnalysisStatus = Literal["completed", "failed", "rate_limited"]


def new_id() -> str:
    return str(uuid.uuid4())


class ResumeAnalysisSuggestion(BaseModel):
    id: str = Field(default_factory=new_id)
    type: SuggestionType = "improvement"
    section: str
    suggestion: str
    priority: Priority = "medium"


class ResumeLearningSuggestion(BaseModel):
    skill: str
    priority: Priority = "medium"
    learningType: LearningType = "concept"
    estimatedTime: str = ""
    reason: str = ""


class ExtractAndAnalyzeResult(BaseModel):
    extractedData: ExtractedResumeData
    overallScore: int = Field(ge=0, le=100)
    atsScore: int = Field(ge=0, le=100)
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    suggestions: List[ResumeAnalysisSuggestion] = Field(default_factory=list)
    learningSuggestions: List[ResumeLearningSuggestion] = Field(default_factory=list)


class ResumeAnalysisFields(BaseModel):
    studentId: str
    resumeFileId: str
    resumePath: str
    resumeUrl: str
    extractedData: ExtractedResumeData
    overallScore: int
    atsScore: int
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    suggestions: List[ResumeAnalysisSuggestion] = Field(default_factory=list)
    learningSuggestions: List[ResumeLearningSuggestion] = Field(default_factory=list)
    targetRole: Optional[str] = None


class StoredResumeAnalysis(ResumeAnalysisFields):
    """Immutable, timestamped analysis record. Re-analysis creates a new one."""
    id: str
    analyzedAt: datetime
    createdAt: datetime

    model_config = pydantic.ConfigDict(extra="ignore", from_attributes=True)


class ImprovedResumeFields(BaseModel):
    studentId: str
    sourceAnalysisId: str
    improvedData: ImprovedResumeData
    pdfFileId: Optional[str] = None
    pdfPath: Optional[str] = None
    pdfUrl: Optional[str] = None
    estimatedScore: Optional[int] = None
    estimatedAtsScore: Optional[int] = None


class ImprovedResumeRecord(ImprovedResumeFields):
    id: str
    createdAt: datetime

    model_config = pydantic.ConfigDict(extra="ignore", from_attributes=True)


class ResumeHistoryFields(BaseModel):
    studentId: str
    resumeFileId: str
    resumeUrl: str
    resumePath: str
    version: int = 1
    resumeScore: int = 0
    atsScore: int = 0
    isFinal: bool = False
    generatedFrom: Literal["upload", "improvement"] = "upload"


class ResumeHistoryEntry(ResumeHistoryFields):
    id: str
    createdAt: datetime

    model_config = pydantic.ConfigDict(extra="ignore", from_attributes=True)


class LearningSuggestionRecord(ResumeLearningSuggestion):
    id: str
    studentId: str
    completed: bool = False
    createdAt: datetime

    model_config = pydantic.ConfigDict(extra="ignore", from_attributes=True)


class StoredFile(BaseModel):
    fileId: str
    path: str
    downloadUrl: str


class QuotaInfo(BaseModel):
    minuteRemaining: int
    dayRemaining: int
    resetInSeconds: int


class QuotaDecision(QuotaInfo):
    allowed: bool
    retryAfter: Optional[int] = None


# ---------------------------------------------------------------------------
# Results of the pipeline operations
# ---------------------------------------------------------------------------

class AnalysisSummary(BaseModel):
    overallScore: int
    atsScore: int
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    suggestions: List[ResumeAnalysisSuggestion] = Field(default_factory=list)
    learningSuggestions: List[ResumeLearningSuggestion] = Field(default_factory=list)
    extractedSkillsCount: int = 0
    extractedEducationCount: int = 0
    extractedExperienceCount: int = 0
    extractedProjectsCount: int = 0


class UploadAnalyzeResult(BaseModel):
    fileId: str
    downloadUrl: str
    analysisStatus: AnalysisStatus
    analysisId: Optional[str] = None
    analysis: Optional[AnalysisSummary] = None
    error: Optional[str] = None
    retryAfter: Optional[int] = None
    quota: Optional[QuotaInfo] = None
    message: str


class ReanalyzeResult(BaseModel):
    analysisId: str
    analysis: StoredResumeAnalysis
    cached: bool


class ImproveResult(BaseModel):
    improvedResumeId: Optional[str] = None
    pdfUrl: Optional[str] = None
    pdfGenerated: bool = False
    pdfUploaded: bool = False
    improvedData: ImprovedResumeData
    improvementSummary: List[str] = Field(default_factory=list)
    estimatedScore: int
    estimatedAtsScore: int
    originalScore: int
    originalAtsScore: int
    error: Optional[str] = None
    quota: Optional[QuotaInfo] = None


class ReconcileResult(BaseModel):
    category: str
    strategy: str
    merged: List[Union[MergedSkill, MergedEducation, MergedExperience, MergedProject]] = Field(default_factory=list)
    updatedFields: Dict[str, Any] = Field(default_factory=dict)


class MergedProfileView(BaseModel):
    skills: List[MergedSkill] = Field(default_factory=list)
    education: List[MergedEducation] = Field(default_factory=list)
    experience: List[MergedExperience] = Field(default_factory=list)
    resumeOnlySkills: int = 0
    resumeOnlyEducation: int = 0
    resumeOnlyExperience: int = 0


class SetFinalResult(BaseModel):
    historyId: str
    resumeUrl: str
    resumeScore: int
    atsScore: int


class PipelineResponse(BaseModel):
    """Envelope returned by the API: { status, message, data }"""
    status: int = 200
    message: str = "OK"
    data: Optional[Any] = None
