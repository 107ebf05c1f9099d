"""Resume pipeline: upload, analysis, improvement and profile reconciliation.

Each operation runs as one request-scoped async task. Stages that fail after
an earlier stage succeeded (text extraction, AI analysis, PDF rendering,
PDF upload) are reported through a status-tagged result instead of an
exception so that already-computed data is never discarded. Only input
validation fails fast, before any side effect.
"""
import logging
import re
import time
from functools import lru_cache
from typing import Awaitable, Callable, List, Optional

from placement.core.config import get_settings
from placement.core.errors import (
    AnalysisFailed,
    ExtractionFailed,
    FetchFailed,
    NotFound,
    PdfGenerationFailed,
    RateLimited,
    UploadFailed,
    ValidationError,
)
from placement.crud.crud_analysis import AnalysisStore
from placement.crud.crud_history import ResumeHistoryStore
from placement.crud.crud_improved import ImprovedResumeStore
from placement.crud.crud_learning import LearningSuggestionStore
from placement.crud.crud_student import StudentStore
from placement.schemas.AnalysisSchemas import (
    AnalysisSummary,
    ExtractAndAnalyzeResult,
    ImprovedResumeFields,
    ImproveResult,
    MergedProfileView,
    QuotaInfo,
    ReanalyzeResult,
    ReconcileResult,
    ResumeAnalysisFields,
    ResumeHistoryEntry,
    ResumeHistoryFields,
    SetFinalResult,
    StoredFile,
    StoredResumeAnalysis,
    UploadAnalyzeResult,
)
from placement.schemas.ProfileSchemas import StudentProfile
from placement.services import profile_merge
from placement.services.pdf_service import ALLOWED_MIME_TYPES, DOCX_MIME, PDF_MIME, extract_text
from placement.services.quota_service import QuotaTracker, get_quota_tracker
from placement.services.resume_ai import ResumeAIService, estimate_improved_ats, estimate_improved_score
from placement.services.resume_html import render_resume_html
from placement.tools.file_uploader import CloudinaryStorage, HttpFetcher
from placement.tools.pdf_generator import render_pdf

logger = logging.getLogger(__name__)

MAX_LEARNING_SUGGESTIONS = 5

SHADOW_FIELDS = {
    "skills": "resumeExtractedSkills",
    "education": "resumeExtractedEducation",
    "experience": "resumeExtractedExperience",
}


def _timestamp_ms() -> int:
    return int(time.time() * 1000)


def _safe_name(name: Optional[str]) -> str:
    cleaned = re.sub(r"[^A-Za-z0-9]+", "_", name or "").strip("_")
    return cleaned or "resume"


def sniff_mime_type(content: bytes, url: str = "") -> str:
    """Guess the MIME type of a downloaded resume from its signature, then its URL."""
    if content.startswith(b"%PDF-"):
        return PDF_MIME
    if content.startswith(b"PK"):
        return DOCX_MIME
    lowered = url.lower().split("?", 1)[0]
    for mime, ext in ALLOWED_MIME_TYPES.items():
        if lowered.endswith("." + ext):
            return mime
    return PDF_MIME


def summarize(result: ExtractAndAnalyzeResult) -> AnalysisSummary:
    data = result.extractedData
    return AnalysisSummary(
        overallScore=result.overallScore,
        atsScore=result.atsScore,
        strengths=result.strengths,
        weaknesses=result.weaknesses,
        suggestions=result.suggestions,
        learningSuggestions=result.learningSuggestions,
        extractedSkillsCount=len(data.skills),
        extractedEducationCount=len(data.education),
        extractedExperienceCount=len(data.experience),
        extractedProjectsCount=len(data.projects),
    )


class ResumePipeline:
    def __init__(
        self,
        storage=None,
        fetcher=None,
        ai: Optional[ResumeAIService] = None,
        quota: Optional[QuotaTracker] = None,
        analyses: Optional[AnalysisStore] = None,
        students: Optional[StudentStore] = None,
        improved: Optional[ImprovedResumeStore] = None,
        history: Optional[ResumeHistoryStore] = None,
        learning: Optional[LearningSuggestionStore] = None,
        pdf_renderer: Callable[[str], Awaitable[bytes]] = render_pdf,
        text_extractor: Callable[[bytes, str], str] = extract_text,
    ):
        self.quota = quota or get_quota_tracker()
        self.storage = storage or CloudinaryStorage()
        self.fetcher = fetcher or HttpFetcher()
        self.ai = ai or ResumeAIService(quota=self.quota)
        self.analyses = analyses or AnalysisStore()
        self.students = students or StudentStore()
        self.improved = improved or ImprovedResumeStore()
        self.history = history or ResumeHistoryStore()
        self.learning = learning or LearningSuggestionStore()
        self.pdf_renderer = pdf_renderer
        self.text_extractor = text_extractor

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _require_profile(self, student_id: str) -> StudentProfile:
        if not student_id:
            raise ValidationError("Student ID is required")
        profile = await self.students.get(student_id)
        if profile is None:
            raise NotFound(f"Student profile {student_id} not found")
        return profile

    def validate_upload(self, file_bytes: bytes, mime_type: str, student_id: str) -> None:
        if not student_id:
            raise ValidationError("Student ID is required")
        if not file_bytes:
            raise ValidationError("No file provided")
        if mime_type not in ALLOWED_MIME_TYPES:
            raise ValidationError("Invalid file type. Please upload a PDF or Word document.")
        max_bytes = get_settings().MAX_RESUME_BYTES
        if len(file_bytes) > max_bytes:
            raise ValidationError(f"File too large. Maximum size is {max_bytes // (1024 * 1024)}MB.")

    async def _record_analysis(
        self,
        student_id: str,
        stored: StoredFile,
        result: ExtractAndAnalyzeResult,
        target_role: Optional[str],
    ) -> StoredResumeAnalysis:
        """Persist a fresh analysis and refresh the profile's scores and shadow fields."""
        analysis = await self.analyses.save(ResumeAnalysisFields(
            studentId=student_id,
            resumeFileId=stored.fileId,
            resumePath=stored.path,
            resumeUrl=stored.downloadUrl,
            extractedData=result.extractedData,
            overallScore=result.overallScore,
            atsScore=result.atsScore,
            strengths=result.strengths,
            weaknesses=result.weaknesses,
            suggestions=result.suggestions,
            learningSuggestions=result.learningSuggestions,
            targetRole=target_role,
        ))

        data = result.extractedData
        await self.students.update(student_id, {
            "resumeScore": result.overallScore,
            "atsScore": result.atsScore,
            "latestAnalysisId": analysis.id,
            "resumeExtractedSkills": list(data.skills),
            "resumeExtractedEducation": [profile_merge.to_profile_education(e) for e in data.education],
            "resumeExtractedExperience": [profile_merge.to_profile_experience(e) for e in data.experience],
        })

        for suggestion in result.learningSuggestions[:MAX_LEARNING_SUGGESTIONS]:
            try:
                await self.learning.add(student_id, suggestion)
            except Exception:
                logger.exception("Failed to save learning suggestion %r", suggestion.skill)

        return analysis

    # ------------------------------------------------------------------
    # Upload and analysis
    # ------------------------------------------------------------------

    async def upload_and_analyze(
        self,
        file_bytes: bytes,
        filename: str,
        mime_type: str,
        student_id: str,
        target_role: Optional[str] = None,
    ) -> UploadAnalyzeResult:
        self.validate_upload(file_bytes, mime_type, student_id)
        await self._require_profile(student_id)

        ext = ALLOWED_MIME_TYPES[mime_type]
        path = f"resumes/{student_id}/resume_{student_id}_{_timestamp_ms()}.{ext}"
        stored = await self.storage.upload(file_bytes, path)
        logger.info("Stored resume %s (%s) for student %s", filename, stored.fileId, student_id)

        await self.students.update(student_id, {
            "resumeFileId": stored.fileId,
            "resumeUrl": stored.downloadUrl,
            "resumePath": stored.path,
        })

        try:
            text = self.text_extractor(file_bytes, mime_type)
        except ExtractionFailed as e:
            logger.warning("Text extraction failed for %s: %s", stored.fileId, e.message)
            return UploadAnalyzeResult(
                fileId=stored.fileId,
                downloadUrl=stored.downloadUrl,
                analysisStatus="failed",
                error=e.message,
                message="Resume uploaded, but its text could not be extracted.",
            )

        try:
            result = await self.ai.extract_and_analyze(text, target_role)
        except RateLimited as e:
            return UploadAnalyzeResult(
                fileId=stored.fileId,
                downloadUrl=stored.downloadUrl,
                analysisStatus="rate_limited",
                error=e.message,
                retryAfter=e.retry_after,
                quota=self.quota.get_quota_info(),
                message=f"Resume uploaded. Analysis is rate limited; retry in {e.retry_after} seconds.",
            )
        except AnalysisFailed as e:
            return UploadAnalyzeResult(
                fileId=stored.fileId,
                downloadUrl=stored.downloadUrl,
                analysisStatus="failed",
                error=e.message,
                quota=self.quota.get_quota_info(),
                message="Resume uploaded, but analysis failed. You can retry without re-uploading.",
            )

        analysis = await self._record_analysis(student_id, stored, result, target_role)
        await self.history.add(ResumeHistoryFields(
            studentId=student_id,
            resumeFileId=stored.fileId,
            resumeUrl=stored.downloadUrl,
            resumePath=stored.path,
            resumeScore=result.overallScore,
            atsScore=result.atsScore,
            generatedFrom="upload",
        ))

        return UploadAnalyzeResult(
            fileId=stored.fileId,
            downloadUrl=stored.downloadUrl,
            analysisStatus="completed",
            analysisId=analysis.id,
            analysis=summarize(result),
            quota=self.quota.get_quota_info(),
            message="Resume uploaded and analyzed successfully.",
        )

    async def reanalyze(
        self,
        student_id: str,
        download_url: Optional[str] = None,
        force_reanalyze: bool = False,
        target_role: Optional[str] = None,
    ) -> ReanalyzeResult:
        profile = await self._require_profile(student_id)
        url = download_url or profile.resumeUrl
        if not url:
            raise ValidationError("No resume on file. Please upload a resume first.")

        is_current_file = profile.resumeFileId is not None and url == profile.resumeUrl
        if is_current_file and not force_reanalyze:
            existing = await self.analyses.get_by_file_id(profile.resumeFileId)
            if existing is not None:
                logger.info("Returning cached analysis %s for student %s", existing.id, student_id)
                return ReanalyzeResult(analysisId=existing.id, analysis=existing, cached=True)

        self.quota.ensure_available()

        try:
            content = await self.fetcher.fetch(url)
        except Exception as e:
            logger.exception("Failed to download resume from %s", url)
            raise FetchFailed(f"Could not download the resume file: {str(e)[:150]}")

        text = self.text_extractor(content, sniff_mime_type(content, url))
        result = await self.ai.extract_and_analyze(text, target_role)

        if is_current_file:
            stored = StoredFile(fileId=profile.resumeFileId, path=profile.resumePath or "", downloadUrl=url)
        else:
            stored = StoredFile(fileId=url, path="", downloadUrl=url)
        analysis = await self._record_analysis(student_id, stored, result, target_role)
        return ReanalyzeResult(analysisId=analysis.id, analysis=analysis, cached=False)

    async def get_stored_analysis(
        self,
        student_id: Optional[str] = None,
        analysis_id: Optional[str] = None,
    ) -> StoredResumeAnalysis:
        if analysis_id:
            analysis = await self.analyses.get_by_id(analysis_id)
            if analysis is not None and student_id and analysis.studentId != student_id:
                analysis = None
        elif student_id:
            analysis = await self.analyses.get_latest(student_id)
        else:
            raise ValidationError("Either a student ID or an analysis ID is required")

        if analysis is None:
            raise NotFound("No resume analysis found")
        return analysis

    async def list_analyses(self, student_id: str) -> List[StoredResumeAnalysis]:
        if not student_id:
            raise ValidationError("Student ID is required")
        return await self.analyses.list_for_student(student_id)

    # ------------------------------------------------------------------
    # Improvement
    # ------------------------------------------------------------------

    async def improve_resume(
        self,
        student_id: str,
        analysis_id: Optional[str] = None,
        target_role: Optional[str] = None,
    ) -> ImproveResult:
        analysis = await self.get_stored_analysis(student_id=student_id, analysis_id=analysis_id)
        self.quota.ensure_available()

        improved = await self.ai.improve(
            analysis.extractedData,
            analysis.suggestions,
            target_role or analysis.targetRole,
        )
        estimated = estimate_improved_score(analysis.overallScore)
        estimated_ats = estimate_improved_ats(analysis.atsScore)

        error = None
        pdf_bytes = None
        stored = None
        try:
            pdf_bytes = await self.pdf_renderer(render_resume_html(improved))
        except PdfGenerationFailed as e:
            logger.warning("PDF generation failed for student %s: %s", student_id, e.message)
            error = e.message
        except Exception as e:
            logger.exception("PDF rendering crashed for student %s", student_id)
            error = f"Failed to generate PDF: {e}"

        if pdf_bytes is not None:
            name = _safe_name(improved.personalInfo.name)
            path = f"resumes/{student_id}/{_timestamp_ms()}_improved_{name}.pdf"
            try:
                stored = await self.storage.upload(pdf_bytes, path)
            except UploadFailed as e:
                logger.warning("Improved PDF upload failed for student %s: %s", student_id, e.message)
                error = e.message
            except Exception as e:
                logger.exception("Improved PDF upload crashed for student %s", student_id)
                error = f"Failed to upload improved resume PDF: {e}"

        record = None
        try:
            record = await self.improved.save(ImprovedResumeFields(
                studentId=student_id,
                sourceAnalysisId=analysis.id,
                improvedData=improved,
                pdfFileId=stored.fileId if stored else None,
                pdfPath=stored.path if stored else None,
                pdfUrl=stored.downloadUrl if stored else None,
                estimatedScore=estimated,
                estimatedAtsScore=estimated_ats,
            ))
        except Exception:
            logger.exception("Failed to save improved resume for student %s", student_id)
            error = error or "Improved resume could not be saved"

        if stored is not None:
            try:
                await self.history.add(ResumeHistoryFields(
                    studentId=student_id,
                    resumeFileId=stored.fileId,
                    resumeUrl=stored.downloadUrl,
                    resumePath=stored.path,
                    resumeScore=estimated,
                    atsScore=estimated_ats,
                    generatedFrom="improvement",
                ))
            except Exception:
                logger.exception("Failed to add improved resume to history for student %s", student_id)
                error = error or "Improved resume could not be added to history"

        return ImproveResult(
            improvedResumeId=record.id if record else None,
            pdfUrl=stored.downloadUrl if stored else None,
            pdfGenerated=pdf_bytes is not None,
            pdfUploaded=stored is not None,
            improvedData=improved,
            improvementSummary=improved.improvementSummary,
            estimatedScore=estimated,
            estimatedAtsScore=estimated_ats,
            originalScore=analysis.overallScore,
            originalAtsScore=analysis.atsScore,
            error=error,
            quota=self.quota.get_quota_info(),
        )

    # ------------------------------------------------------------------
    # Profile reconciliation
    # ------------------------------------------------------------------

    async def _extracted_items(self, profile: StudentProfile, category: str) -> list:
        if category in SHADOW_FIELDS:
            return getattr(profile, SHADOW_FIELDS[category])
        latest = await self.analyses.get_latest(profile.id)
        return latest.extractedData.projects if latest else []

    async def reconcile(self, student_id: str, category: str, strategy: str = "merge") -> ReconcileResult:
        profile = await self._require_profile(student_id)
        if category not in profile_merge.CATEGORIES:
            raise ValidationError(f"Unknown profile category: {category}")

        extracted = await self._extracted_items(profile, category)
        merged = profile_merge.reconcile(category, getattr(profile, category), extracted, strategy)

        updated = {}
        if strategy != "profile":
            native = profile_merge.to_native_items(category, merged)
            await self.students.update(student_id, {category: native})
            updated[category] = [n if isinstance(n, str) else n.model_dump() for n in native]
            logger.info("Reconciled %s for student %s with strategy %s (%d items)",
                        category, student_id, strategy, len(native))

        return ReconcileResult(category=category, strategy=strategy, merged=merged, updatedFields=updated)

    def _view(self, profile: StudentProfile) -> MergedProfileView:
        skills = profile_merge.merge_skills(profile.skills, profile.resumeExtractedSkills)
        education = profile_merge.merge_education(profile.education, profile.resumeExtractedEducation)
        experience = profile_merge.merge_experience(profile.experience, profile.resumeExtractedExperience)
        return MergedProfileView(
            skills=skills,
            education=education,
            experience=experience,
            resumeOnlySkills=profile_merge.resume_only_count(skills),
            resumeOnlyEducation=profile_merge.resume_only_count(education),
            resumeOnlyExperience=profile_merge.resume_only_count(experience),
        )

    async def merged_profile_view(self, student_id: str) -> MergedProfileView:
        return self._view(await self._require_profile(student_id))

    async def remove_profile_item(self, student_id: str, category: str, key: str, source: str) -> MergedProfileView:
        """Remove one entry from either the manual field or the resume shadow field."""
        profile = await self._require_profile(student_id)
        if not key:
            raise ValidationError("An item key is required")

        if source == "manual":
            if category not in profile_merge.CATEGORIES:
                raise ValidationError(f"Unknown profile category: {category}")
            field = category
            remaining = profile_merge.remove_from_manual(category, getattr(profile, field), key)
        elif source == "resume":
            if category not in SHADOW_FIELDS:
                raise ValidationError(f"Resume-extracted {category} cannot be removed individually")
            field = SHADOW_FIELDS[category]
            remaining = profile_merge.remove_from_shadow(category, getattr(profile, field), key)
        else:
            raise ValidationError("Source must be 'manual' or 'resume'")

        updated = await self.students.update(student_id, {field: remaining})
        return self._view(updated or profile)

    # ------------------------------------------------------------------
    # Resume history
    # ------------------------------------------------------------------

    async def list_history(self, student_id: str) -> List[ResumeHistoryEntry]:
        if not student_id:
            raise ValidationError("Student ID is required")
        return await self.history.list_for_student(student_id)

    async def set_final_resume(self, student_id: str, history_id: str) -> SetFinalResult:
        if not student_id or not history_id:
            raise ValidationError("Student ID and history ID are required")
        entry = await self.history.set_final(student_id, history_id)
        if entry is None:
            raise NotFound("Resume history not found")

        await self.students.update(student_id, {
            "finalResumeId": entry.id,
            "resumeFileId": entry.resumeFileId,
            "resumeUrl": entry.resumeUrl,
            "resumePath": entry.resumePath,
            "resumeScore": entry.resumeScore,
            "atsScore": entry.atsScore,
        })
        return SetFinalResult(
            historyId=entry.id,
            resumeUrl=entry.resumeUrl,
            resumeScore=entry.resumeScore,
            atsScore=entry.atsScore,
        )

    async def delete_history_entry(self, student_id: str, history_id: str) -> ResumeHistoryEntry:
        if not student_id or not history_id:
            raise ValidationError("Student ID and history ID are required")
        entry = await self.history.delete(student_id, history_id)
        if entry is None:
            raise NotFound("Resume history not found")
        if entry.isFinal:
            await self.students.update(student_id, {"finalResumeId": None})
        logger.info("Deleted resume history %s (version %d) for student %s", entry.id, entry.version, student_id)
        return entry

    def get_quota_info(self) -> QuotaInfo:
        return self.quota.get_quota_info()


@lru_cache()
def get_resume_pipeline() -> ResumePipeline:
    return ResumePipeline()
