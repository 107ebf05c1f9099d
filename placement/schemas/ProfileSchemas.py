from typing import Any, Dict, List, Literal, Optional
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

MergeStrategy = Literal["profile", "resume", "merge"]
MergeCategory = Literal["skills", "education", "experience", "projects"]
ItemSource = Literal["manual", "resume"]


class Education(BaseModel):
    id: str
    institution: str
    degree: str
    field: str = ""
    startYear: Optional[int] = None
    endYear: Optional[int] = None
    grade: Optional[str] = None
    current: bool = False


class Experience(BaseModel):
    id: str
    company: str
    role: str
    description: str = ""
    startDate: str = ""
    endDate: Optional[str] = None
    current: bool = False
    skills: List[str] = Field(default_factory=list)


class Project(BaseModel):
    id: str
    title: str
    description: str = ""
    technologies: List[str] = Field(default_factory=list)
    link: Optional[str] = None


class StudentProfile(BaseModel):
    """The merge target: manual fields plus resume-extracted shadow fields.

    Manual fields (skills, education, experience, projects) only change through
    explicit user actions. The ``resumeExtracted*`` shadow fields are replaced
    wholesale by every fresh extraction.
    """
    id: str
    name: Optional[str] = None
    email: Optional[str] = None

    skills: List[str] = Field(default_factory=list)
    education: List[Education] = Field(default_factory=list)
    experience: List[Experience] = Field(default_factory=list)
    projects: List[Project] = Field(default_factory=list)
    certifications: List[Dict[str, Any]] = Field(default_factory=list)
    achievements: List[Dict[str, Any]] = Field(default_factory=list)

    resumeExtractedSkills: List[str] = Field(default_factory=list)
    resumeExtractedEducation: List[Education] = Field(default_factory=list)
    resumeExtractedExperience: List[Experience] = Field(default_factory=list)

    resumeFileId: Optional[str] = None
    resumeUrl: Optional[str] = None
    resumePath: Optional[str] = None
    resumeScore: Optional[int] = None
    atsScore: Optional[int] = None
    latestAnalysisId: Optional[str] = None
    finalResumeId: Optional[str] = None
    updatedAt: Optional[datetime] = None

    model_config = ConfigDict(extra="ignore")


# Request-scoped merge views; never persisted directly.

class MergedSkill(BaseModel):
    skill: str
    source: Literal["manual", "resume", "both"]


class MergedEducation(Education):
    source: ItemSource


class MergedExperience(Experience):
    source: ItemSource


class MergedProject(Project):
    source: ItemSource
