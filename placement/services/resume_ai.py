"""AI invokers for resume extraction, analysis and improvement.

Both invokers share the same pattern: a pre-flight quota check, one structured
Gemini call (quota consumed right before it), Pydantic validation of the JSON
reply, then normalization into the domain shapes. Provider failures are
classified into ``RateLimited`` or ``AnalysisFailed`` with a specific message.
"""
import json
import logging
import re
from typing import List, Optional, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from placement.core.config import get_settings
from placement.core.errors import AnalysisFailed, PipelineError, RateLimited
from placement.schemas.AnalysisSchemas import (
    ExtractAndAnalyzeResult,
    ResumeAnalysisSuggestion,
    ResumeLearningSuggestion,
)
from placement.schemas.ResumeSchemas import (
    ExtractedResumeData,
    GeminiAnalysis,
    GeminiExtractionResponse,
    GeminiImproveResponse,
    GeminiResumeData,
    ImprovedResumeData,
)
from placement.services.quota_service import QuotaTracker, get_quota_tracker
from placement.tools.genai_client import GeminiClient

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

SUGGESTION_TYPES = {"improvement", "keyword", "format", "content", "missing"}
PRIORITIES = {"high", "medium", "low"}
LEARNING_TYPES = {"concept", "tool", "practice"}

DEFAULT_TARGET_ROLE = "Software Engineering"

EXTRACTION_PROMPT = """You are an expert resume parser and career counselor. Your task is to:
1. Extract ALL structured information from the resume
2. Provide a comprehensive analysis with scores and suggestions

RESUME TEXT:
\"\"\"
{resume_text}
\"\"\"

TARGET ROLE: {target_role}

INSTRUCTIONS:
1. Extract all information you can find. For missing fields, use null.
2. For education/experience dates, preserve the original format found in the resume.
3. For skills, extract ALL technical skills, soft skills, tools, frameworks, and languages mentioned.
4. Provide honest scores (0-100):
   - overallScore: Quality of content, achievements, quantification, relevance
   - atsScore: ATS compatibility (simple formatting, keywords, standard sections)
5. List 3-5 strengths (what the resume does well)
6. List 3-5 weaknesses (areas needing improvement)
7. Provide 5-10 specific, actionable suggestions with priority levels (high, medium, low)
   and a type (improvement, keyword, format, content, missing)
8. Provide 3-5 learning suggestions for skill gaps with a learningType (concept, tool, practice)

Be thorough but realistic in scoring. Most student resumes score 40-70."""

IMPROVE_PROMPT = """You are an expert resume writer. Your task is to IMPROVE the resume content based on the analysis suggestions provided.

ORIGINAL EXTRACTED RESUME DATA:
{resume_json}

IMPROVEMENT SUGGESTIONS TO APPLY:
{suggestions}
{target_role}
INSTRUCTIONS:
1. Improve ALL content based on the suggestions:
   - Rewrite experience descriptions with action verbs and quantified achievements
   - Enhance project descriptions with technical details and impact
   - Improve the summary to be compelling and role-focused
   - Optimize skill ordering (most relevant first)
   - Improve achievement descriptions to highlight impact
2. PRESERVE all original information (dates, names, contact info)
3. DO NOT invent new experiences or projects - only improve existing content
4. Add highlight bullet points for each experience entry
5. Ensure descriptions are concise but impactful (2-4 sentences each)
6. In improvementSummary, list what specific improvements you made (5-10 items)

Return the improved resume in the exact same structure as the input."""


def clamp_score(value: float) -> int:
    return min(100, max(0, int(round(value))))


def estimate_improved_score(original: int) -> int:
    """Heuristic: an applied improvement is assumed to add a fixed bonus."""
    return min(100, original + get_settings().IMPROVEMENT_SCORE_BONUS)


def estimate_improved_ats(original: int) -> int:
    return min(100, original + get_settings().IMPROVEMENT_ATS_BONUS)


RATE_LIMIT_PATTERN = re.compile(r"\brate(?:[\s_-]?limit|\b)")


def classify_ai_error(error: Exception) -> PipelineError:
    """Map a provider failure onto RateLimited or AnalysisFailed with a readable message."""
    message = str(error)
    lowered = message.lower()

    if "GEMINI_API_KEY" in message or "api key" in lowered:
        return AnalysisFailed("AI service is not configured (missing GEMINI_API_KEY). Please contact support.")
    if "quota" in lowered or "429" in lowered:
        return RateLimited("AI service quota exceeded. Please try again later.")
    if RATE_LIMIT_PATTERN.search(lowered):
        return RateLimited("AI service is rate limited. Please try again in a moment.")
    if "model" in lowered and "not" in lowered:
        return AnalysisFailed("AI service configuration error (model unavailable). Please contact support.")
    return AnalysisFailed(f"Failed to analyze resume: {message[:150]}")


def _clean(value: Optional[str]) -> Optional[str]:
    """Empty strings and nulls both mean absent."""
    if value is None:
        return None
    value = value.strip()
    return value or None


def normalize_resume_data(data: GeminiResumeData) -> dict:
    info = data.personalInfo
    return {
        "personalInfo": {k: _clean(v) for k, v in info.model_dump().items()},
        "education": [
            {
                "institution": e.institution,
                "degree": e.degree,
                "field": _clean(e.field),
                "startYear": _clean(e.startYear),
                "endYear": _clean(e.endYear),
                "grade": _clean(e.grade),
                "current": e.current,
            }
            for e in data.education
        ],
        "experience": [
            {
                "company": e.company,
                "role": e.role,
                "description": _clean(e.description),
                "startDate": _clean(e.startDate),
                "endDate": _clean(e.endDate),
                "current": e.current,
                "highlights": [h for h in e.highlights if h and h.strip()],
            }
            for e in data.experience
        ],
        "projects": [
            {
                "title": p.title,
                "description": _clean(p.description),
                "technologies": list(p.technologies),
                "link": _clean(p.link),
            }
            for p in data.projects
        ],
        "skills": [s.strip() for s in data.skills if s and s.strip()],
        "certifications": [
            {"name": c.name, "issuer": _clean(c.issuer), "date": _clean(c.date)}
            for c in data.certifications
        ],
        "achievements": [
            {"title": a.title, "description": _clean(a.description)}
            for a in data.achievements
        ],
    }


def normalize_analysis(analysis: GeminiAnalysis) -> dict:
    suggestions = [
        ResumeAnalysisSuggestion(
            type=s.type if s.type in SUGGESTION_TYPES else "improvement",
            section=s.section,
            suggestion=s.suggestion,
            priority=s.priority if s.priority in PRIORITIES else "medium",
        )
        for s in analysis.suggestions
    ]
    learning = [
        ResumeLearningSuggestion(
            skill=l.skill,
            priority=l.priority if l.priority in PRIORITIES else "medium",
            learningType=l.learningType if l.learningType in LEARNING_TYPES else "concept",
            estimatedTime=l.estimatedTime,
            reason=l.reason,
        )
        for l in analysis.learningSuggestions
    ]
    return {
        "overallScore": clamp_score(analysis.overallScore),
        "atsScore": clamp_score(analysis.atsScore),
        "strengths": list(analysis.strengths),
        "weaknesses": list(analysis.weaknesses),
        "suggestions": suggestions,
        "learningSuggestions": learning,
    }


def format_suggestions(suggestions: List[ResumeAnalysisSuggestion]) -> str:
    return "\n".join(
        f"{i}. [{s.priority.upper()}] {s.section}: {s.suggestion}"
        for i, s in enumerate(suggestions, start=1)
    )


class ResumeAIService:
    def __init__(self, client: Optional[GeminiClient] = None, quota: Optional[QuotaTracker] = None):
        self.client = client or GeminiClient()
        self.quota = quota or get_quota_tracker()

    async def _call(self, prompt: str, schema: Type[T]) -> T:
        self.quota.ensure_available()
        decision = self.quota.check_and_consume()
        if not decision.allowed:
            raise RateLimited(
                f"Rate limit exceeded. Please try again in {decision.retryAfter} seconds.",
                retry_after=decision.retryAfter or 60,
                quota=decision.model_dump(exclude={"allowed", "retryAfter"}),
            )

        try:
            text = await self.client.generate(prompt, schema)
        except Exception as e:
            logger.exception("Gemini call failed")
            raise classify_ai_error(e)

        if not text or not text.strip():
            raise AnalysisFailed("AI service returned an empty response")
        try:
            return schema.model_validate(json.loads(text))
        except (json.JSONDecodeError, PydanticValidationError) as e:
            logger.error("Malformed AI response for %s: %s", schema.__name__, e)
            raise AnalysisFailed(f"AI service returned a malformed response: {str(e)[:150]}")

    async def extract_and_analyze(self, resume_text: str, target_role: Optional[str] = None) -> ExtractAndAnalyzeResult:
        prompt = EXTRACTION_PROMPT.format(
            resume_text=resume_text,
            target_role=target_role or DEFAULT_TARGET_ROLE,
        )
        parsed = await self._call(prompt, GeminiExtractionResponse)

        extracted = normalize_resume_data(parsed.extractedData)
        extracted["rawTextLength"] = len(resume_text)
        return ExtractAndAnalyzeResult(
            extractedData=ExtractedResumeData.model_validate(extracted),
            **normalize_analysis(parsed.analysis),
        )

    async def improve(
        self,
        extracted_data: ExtractedResumeData,
        suggestions: List[ResumeAnalysisSuggestion],
        target_role: Optional[str] = None,
    ) -> ImprovedResumeData:
        prompt = IMPROVE_PROMPT.format(
            resume_json=extracted_data.model_dump_json(indent=2, exclude={"rawTextLength"}),
            suggestions=format_suggestions(suggestions) or "(none)",
            target_role=f"\nTARGET ROLE: {target_role}\n" if target_role else "",
        )
        parsed = await self._call(prompt, GeminiImproveResponse)

        improved = normalize_resume_data(parsed.improvedData)
        improved["improvementSummary"] = [s for s in parsed.improvementSummary if s and s.strip()]
        return ImprovedResumeData.model_validate(improved)
