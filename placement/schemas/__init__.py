from .ResumeSchemas import (
	ExtractedPersonalInfo,
	ExtractedEducation,
	ExtractedExperience,
	ExtractedProject,
	ExtractedCertification,
	ExtractedAchievement,
	ExtractedResumeData,
	ImprovedResumeData,
)
from .ProfileSchemas import (
	Education,
	Experience,
	Project,
	StudentProfile,
	MergedSkill,
	MergedEducation,
	MergedExperience,
	MergedProject,
)
from .AnalysisSchemas import (
	ResumeAnalysisSuggestion,
	ResumeLearningSuggestion,
	ExtractAndAnalyzeResult,
	StoredResumeAnalysis,
	ImprovedResumeRecord,
	ResumeHistoryEntry,
	LearningSuggestionRecord,
	StoredFile,
	QuotaInfo,
	QuotaDecision,
)
from .documents import (
	ResumeAnalysisDoc,
	ImprovedResumeDoc,
	ResumeHistoryDoc,
	LearningSuggestionDoc,
	StudentProfileDoc,
)

__all__ = [
	"ExtractedPersonalInfo",
	"ExtractedEducation",
	"ExtractedExperience",
	"ExtractedProject",
	"ExtractedCertification",
	"ExtractedAchievement",
	"ExtractedResumeData",
	"ImprovedResumeData",
	"Education",
	"Experience",
	"Project",
	"StudentProfile",
	"MergedSkill",
	"MergedEducation",
	"MergedExperience",
	"MergedProject",
	"ResumeAnalysisSuggestion",
	"ResumeLearningSuggestion",
	"ExtractAndAnalyzeResult",
	"StoredResumeAnalysis",
	"ImprovedResumeRecord",
	"ResumeHistoryEntry",
	"LearningSuggestionRecord",
	"StoredFile",
	"QuotaInfo",
	"QuotaDecision",
	"ResumeAnalysisDoc",
	"ImprovedResumeDoc",
	"ResumeHistoryDoc",
	"LearningSuggestionDoc",
	"StudentProfileDoc",
]
