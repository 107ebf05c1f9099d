from typing import List, Optional

from pydantic import BaseModel, Field


class ExtractedPersonalInfo(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    linkedin: Optional[str] = None
    github: Optional[str] = None
    portfolio: Optional[str] = None
    summary: Optional[str] = None


class ExtractedEducation(BaseModel):
    institution: str
    degree: str
    field: Optional[str] = None
    startYear: Optional[str] = None
    endYear: Optional[str] = None
    grade: Optional[str] = None
    current: bool = False


class ExtractedExperience(BaseModel):
    company: str
    role: str
    description: Optional[str] = None
    startDate: Optional[str] = None
    endDate: Optional[str] = None
    current: bool = False
    highlights: List[str] = Field(default_factory=list)


class ExtractedProject(BaseModel):
    title: str
    description: Optional[str] = None
    technologies: List[str] = Field(default_factory=list)
    link: Optional[str] = None


class ExtractedCertification(BaseModel):
    name: str
    issuer: Optional[str] = None
    date: Optional[str] = None


class ExtractedAchievement(BaseModel):
    title: str
    description: Optional[str] = None


class ExtractedResumeData(BaseModel):
    """Structured snapshot of one resume file, produced by a single AI extraction.

    Never mutated after creation: a re-analysis produces a new snapshot.
    """
    personalInfo: ExtractedPersonalInfo = Field(default_factory=ExtractedPersonalInfo)
    education: List[ExtractedEducation] = Field(default_factory=list)
    experience: List[ExtractedExperience] = Field(default_factory=list)
    projects: List[ExtractedProject] = Field(default_factory=list)
    skills: List[str] = Field(default_factory=list)
    certifications: List[ExtractedCertification] = Field(default_factory=list)
    achievements: List[ExtractedAchievement] = Field(default_factory=list)
    rawTextLength: Optional[int] = None


class ImprovedResumeData(ExtractedResumeData):
    improvementSummary: List[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Response schemas handed to Gemini. Every key is required; optional values
# are expressed as nullable so the model always returns the full shape.
# ---------------------------------------------------------------------------

class GeminiPersonalInfo(BaseModel):
    name: Optional[str]
    email: Optional[str]
    phone: Optional[str]
    location: Optional[str]
    linkedin: Optional[str]
    github: Optional[str]
    portfolio: Optional[str]
    summary: Optional[str]


class GeminiEducation(BaseModel):
    institution: str
    degree: str
    field: Optional[str]
    startYear: Optional[str]
    endYear: Optional[str]
    grade: Optional[str]
    current: bool


class GeminiExperience(BaseModel):
    company: str
    role: str
    description: Optional[str]
    startDate: Optional[str]
    endDate: Optional[str]
    current: bool
    highlights: List[str]


class GeminiProject(BaseModel):
    title: str
    description: Optional[str]
    technologies: List[str]
    link: Optional[str]


class GeminiCertification(BaseModel):
    name: str
    issuer: Optional[str]
    date: Optional[str]


class GeminiAchievement(BaseModel):
    title: str
    description: Optional[str]


class GeminiResumeData(BaseModel):
    personalInfo: GeminiPersonalInfo
    education: List[GeminiEducation]
    experience: List[GeminiExperience]
    projects: List[GeminiProject]
    skills: List[str]
    certifications: List[GeminiCertification]
    achievements: List[GeminiAchievement]


class GeminiSuggestion(BaseModel):
    type: str
    section: str
    suggestion: str
    priority: str


class GeminiLearningSuggestion(BaseModel):
    skill: str
    priority: str
    learningType: str
    estimatedTime: str
    reason: str


class GeminiAnalysis(BaseModel):
    overallScore: float
    atsScore: float
    strengths: List[str]
    weaknesses: List[str]
    suggestions: List[GeminiSuggestion]
    learningSuggestions: List[GeminiLearningSuggestion]


class GeminiExtractionResponse(BaseModel):
    extractedData: GeminiResumeData
    analysis: GeminiAnalysis


class GeminiImproveResponse(BaseModel):
    improvedData: GeminiResumeData
    improvementSummary: List[str]
