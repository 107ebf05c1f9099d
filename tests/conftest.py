"""Shared fixtures: in-memory stand-ins for storage, AI and the Mongo-backed stores."""
import time
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

import pytest

from placement.core.errors import ExtractionFailed, UploadFailed
from placement.schemas.AnalysisSchemas import (
    ExtractAndAnalyzeResult,
    ImprovedResumeRecord,
    LearningSuggestionRecord,
    ResumeAnalysisSuggestion,
    ResumeHistoryEntry,
    ResumeLearningSuggestion,
    StoredFile,
    StoredResumeAnalysis,
    new_id,
)
from placement.schemas.ProfileSchemas import Education, StudentProfile
from placement.schemas.ResumeSchemas import (
    ExtractedEducation,
    ExtractedExperience,
    ExtractedPersonalInfo,
    ExtractedProject,
    ExtractedResumeData,
    ImprovedResumeData,
)
from placement.services.quota_service import QuotaTracker
from placement.features.resume_pipeline import ResumePipeline

RESUME_TEXT = (
    "Jane Doe\njane@example.com\nEducation: MIT, BS Computer Science 2019-2023\n"
    "Experience: Software Intern at Acme, built internal tooling in Python.\n"
    "Skills: Python, SQL, Docker"
)


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class _Timeline:
    """Monotonic timestamps so newest-first ordering is deterministic."""

    def __init__(self):
        self._t = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def next(self) -> datetime:
        self._t += timedelta(seconds=1)
        return self._t


class FakeStorage:
    def __init__(self):
        self.files: Dict[str, bytes] = {}
        self.fail = False
        self.error: Optional[Exception] = None

    async def upload(self, content: bytes, path: str) -> StoredFile:
        if self.fail:
            raise UploadFailed("Failed to upload file: storage offline")
        if self.error is not None:
            raise self.error
        self.files[path] = content
        return StoredFile(fileId=path, path=path, downloadUrl=f"https://files.test/{path}")


class FakeFetcher:
    def __init__(self, storage: FakeStorage):
        self.storage = storage
        self.calls: List[str] = []

    async def fetch(self, url: str) -> bytes:
        self.calls.append(url)
        path = url.replace("https://files.test/", "")
        return self.storage.files[path]


class FakeAI:
    def __init__(self, quota: QuotaTracker):
        self.quota = quota
        self.analysis_result: Optional[ExtractAndAnalyzeResult] = None
        self.improved_result: Optional[ImprovedResumeData] = None
        self.error: Optional[Exception] = None
        self.extract_calls = 0
        self.improve_calls = 0

    async def extract_and_analyze(self, resume_text, target_role=None):
        self.extract_calls += 1
        if self.error is not None:
            raise self.error
        self.quota.check_and_consume()
        return self.analysis_result.model_copy(deep=True)

    async def improve(self, extracted_data, suggestions, target_role=None):
        self.improve_calls += 1
        if self.error is not None:
            raise self.error
        self.quota.check_and_consume()
        return self.improved_result.model_copy(deep=True)


class InMemoryAnalysisStore:
    def __init__(self, timeline: _Timeline):
        self.records: Dict[str, StoredResumeAnalysis] = {}
        self.timeline = timeline

    async def save(self, fields):
        ts = self.timeline.next()
        record = StoredResumeAnalysis(id=new_id(), analyzedAt=ts, createdAt=ts, **fields.model_dump())
        self.records[record.id] = record
        return record

    def _newest_first(self, records):
        return sorted(records, key=lambda r: (r.analyzedAt, r.id), reverse=True)

    async def get_by_id(self, analysis_id):
        return self.records.get(analysis_id)

    async def get_latest(self, student_id):
        found = self._newest_first(r for r in self.records.values() if r.studentId == student_id)
        return found[0] if found else None

    async def get_by_file_id(self, resume_file_id):
        found = self._newest_first(r for r in self.records.values() if r.resumeFileId == resume_file_id)
        return found[0] if found else None

    async def list_for_student(self, student_id, skip=0, limit=100):
        found = self._newest_first(r for r in self.records.values() if r.studentId == student_id)
        return found[skip:skip + limit]


class InMemoryStudentStore:
    def __init__(self):
        self.profiles: Dict[str, StudentProfile] = {}

    async def get(self, student_id):
        profile = self.profiles.get(student_id)
        return profile.model_copy(deep=True) if profile else None

    async def update(self, student_id, fields):
        profile = self.profiles.get(student_id)
        if profile is None:
            return None
        data = profile.model_dump()
        for key, value in fields.items():
            if isinstance(value, list):
                value = [v.model_dump() if hasattr(v, "model_dump") else v for v in value]
            data[key] = value
        self.profiles[student_id] = StudentProfile.model_validate(data)
        return self.profiles[student_id].model_copy(deep=True)


class InMemoryImprovedStore:
    def __init__(self, timeline: _Timeline):
        self.records: Dict[str, ImprovedResumeRecord] = {}
        self.timeline = timeline
        self.fail = False

    async def save(self, fields):
        if self.fail:
            raise RuntimeError("write failed")
        record = ImprovedResumeRecord(id=new_id(), createdAt=self.timeline.next(), **fields.model_dump())
        self.records[record.id] = record
        return record

    async def get_by_id(self, improved_id):
        return self.records.get(improved_id)


class InMemoryHistoryStore:
    def __init__(self, timeline: _Timeline):
        self.entries: Dict[str, ResumeHistoryEntry] = {}
        self.timeline = timeline

    async def add(self, fields):
        versions = [e.version for e in self.entries.values() if e.studentId == fields.studentId]
        version = max(versions, default=0) + 1
        entry = ResumeHistoryEntry(
            id=new_id(), createdAt=self.timeline.next(),
            **fields.model_dump(exclude={"version"}), version=version,
        )
        self.entries[entry.id] = entry
        return entry

    async def get_by_id(self, history_id):
        return self.entries.get(history_id)

    async def list_for_student(self, student_id):
        found = [e for e in self.entries.values() if e.studentId == student_id]
        return sorted(found, key=lambda e: (e.createdAt, e.version), reverse=True)

    async def set_final(self, student_id, history_id):
        entry = self.entries.get(history_id)
        if entry is None or entry.studentId != student_id:
            return None
        for e in self.entries.values():
            if e.studentId == student_id:
                e.isFinal = e.id == history_id
        return entry

    async def delete(self, student_id, history_id):
        entry = self.entries.get(history_id)
        if entry is None or entry.studentId != student_id:
            return None
        return self.entries.pop(history_id)


class InMemoryLearningStore:
    def __init__(self, timeline: _Timeline):
        self.records: List[LearningSuggestionRecord] = []
        self.timeline = timeline
        self.fail_on: set = set()

    async def add(self, student_id, suggestion):
        if suggestion.skill in self.fail_on:
            raise RuntimeError("write failed")
        record = LearningSuggestionRecord(
            id=new_id(), studentId=student_id, createdAt=self.timeline.next(), **suggestion.model_dump()
        )
        self.records.append(record)
        return record

    async def list_for_student(self, student_id):
        return [r for r in self.records if r.studentId == student_id]


def fake_extract_text(content: bytes, mime_type: str) -> str:
    if content.startswith(b"%PDF-") or mime_type.endswith("document"):
        text = content.decode("latin-1", errors="ignore").replace("%PDF-", "").strip()
        if len(text) < 50:
            raise ExtractionFailed("Could not extract enough text from the resume.")
        return text
    raise ExtractionFailed("Invalid PDF file: missing PDF signature")


class PdfRenderer:
    def __init__(self):
        self.error: Optional[Exception] = None
        self.calls: List[str] = []

    async def __call__(self, html: str) -> bytes:
        self.calls.append(html)
        if self.error is not None:
            raise self.error
        return b"%PDF-1.7 rendered"


def sample_extracted() -> ExtractedResumeData:
    return ExtractedResumeData(
        personalInfo=ExtractedPersonalInfo(name="Jane Doe", email="jane@example.com", summary="Backend-minded student."),
        education=[ExtractedEducation(institution="MIT", degree="BS", field="Computer Science", startYear="2019", endYear="May 2023")],
        experience=[ExtractedExperience(company="Acme", role="Software Intern", description="Built tooling.", startDate="Jun 2022", endDate="Aug 2022")],
        projects=[ExtractedProject(title="Resume Parser", description="Parses resumes.", technologies=["Python"])],
        skills=["Python", "SQL", "Docker"],
        rawTextLength=len(RESUME_TEXT),
    )


def sample_analysis_result() -> ExtractAndAnalyzeResult:
    return ExtractAndAnalyzeResult(
        extractedData=sample_extracted(),
        overallScore=62,
        atsScore=70,
        strengths=["Clear education section"],
        weaknesses=["Few quantified achievements"],
        suggestions=[ResumeAnalysisSuggestion(section="experience", suggestion="Quantify impact", priority="high")],
        learningSuggestions=[
            ResumeLearningSuggestion(skill=f"Skill {i}", priority="medium", learningType="tool")
            for i in range(7)
        ],
    )


def sample_improved() -> ImprovedResumeData:
    data = sample_extracted().model_dump()
    data["experience"][0]["highlights"] = ["Cut build time by 40%"]
    return ImprovedResumeData(**data, improvementSummary=["Quantified internship impact"])


@pytest.fixture
def clock(monkeypatch):
    """Wall clock seen by the quota windows."""
    fake = FakeClock()
    monkeypatch.setattr(time, "time", fake)
    return fake


@pytest.fixture
def quota(clock):
    return QuotaTracker(per_minute=12, per_day=1400)


@pytest.fixture
def env(quota):
    """All collaborators of a pipeline, exposed for assertions."""
    timeline = _Timeline()
    storage = FakeStorage()

    class Env:
        pass

    e = Env()
    e.quota = quota
    e.storage = storage
    e.fetcher = FakeFetcher(storage)
    e.ai = FakeAI(quota)
    e.ai.analysis_result = sample_analysis_result()
    e.ai.improved_result = sample_improved()
    e.analyses = InMemoryAnalysisStore(timeline)
    e.students = InMemoryStudentStore()
    e.improved = InMemoryImprovedStore(timeline)
    e.history = InMemoryHistoryStore(timeline)
    e.learning = InMemoryLearningStore(timeline)
    e.pdf = PdfRenderer()
    e.students.profiles["stu-1"] = StudentProfile(
        id="stu-1",
        name="Jane Doe",
        skills=["python", "Leadership"],
        education=[Education(id="edu-1", institution="MIT", degree="BS", startYear=2019, endYear=2023)],
    )
    return e


@pytest.fixture
def pipeline(env):
    return ResumePipeline(
        storage=env.storage,
        fetcher=env.fetcher,
        ai=env.ai,
        quota=env.quota,
        analyses=env.analyses,
        students=env.students,
        improved=env.improved,
        history=env.history,
        learning=env.learning,
        pdf_renderer=env.pdf,
        text_extractor=fake_extract_text,
    )


@pytest.fixture
def resume_pdf() -> bytes:
    return b"%PDF-" + RESUME_TEXT.encode()


@pytest.fixture
def extracted_data() -> ExtractedResumeData:
    return sample_extracted()
