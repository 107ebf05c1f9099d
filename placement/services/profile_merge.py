"""Reconciliation of resume-extracted data with a student's manual profile.

Each category has a content key used for deduplication:

* skills: the lower-cased, trimmed skill name
* education: institution + degree
* experience: company + role
* projects: title

Manual entries always come first and always win a key collision. Resume
entries are converted into the profile's native shape, with fresh synthetic
ids, before they are merged.
"""
import re
import uuid
from typing import Iterable, List, Optional, Sequence, Union

from placement.core.errors import ValidationError
from placement.schemas.ProfileSchemas import (
    Education,
    Experience,
    MergedEducation,
    MergedExperience,
    MergedProject,
    MergedSkill,
    Project,
)
from placement.schemas.ResumeSchemas import ExtractedEducation, ExtractedExperience, ExtractedProject

CATEGORIES = ("skills", "education", "experience", "projects")
STRATEGIES = ("profile", "resume", "merge")

EducationLike = Union[Education, ExtractedEducation]
ExperienceLike = Union[Experience, ExtractedExperience]
ProjectLike = Union[Project, ExtractedProject]
SkillLike = Union[str, MergedSkill]

_YEAR = re.compile(r"\d{4}")


def normalize_key(value) -> str:
    return str(value or "").lower().strip()


def synthetic_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def parse_year(value) -> Optional[int]:
    """First four-digit group of a free-form date ("Aug 2021" -> 2021)."""
    if value is None:
        return None
    if isinstance(value, int):
        return value
    match = _YEAR.search(str(value))
    return int(match.group()) if match else None


def skill_name(item: SkillLike) -> str:
    return item.skill if isinstance(item, MergedSkill) else str(item).strip()


def item_key(category: str, item) -> str:
    if category == "skills":
        return normalize_key(skill_name(item))
    if category == "education":
        return f"{normalize_key(item.institution)}|{normalize_key(item.degree)}"
    if category == "experience":
        return f"{normalize_key(item.company)}|{normalize_key(item.role)}"
    if category == "projects":
        return normalize_key(item.title)
    raise ValidationError(f"Unknown profile category: {category}")


def normalize_removal_key(category: str, key: str) -> str:
    """Normalize a caller-supplied key such as "MIT|BS" the same way item_key does."""
    if category in ("education", "experience"):
        parts = key.split("|", 1)
        if len(parts) != 2:
            raise ValidationError(f"A {category} key must look like 'first|second'")
        return f"{normalize_key(parts[0])}|{normalize_key(parts[1])}"
    if category not in CATEGORIES:
        raise ValidationError(f"Unknown profile category: {category}")
    return normalize_key(key)


# Boundary normalization: extracted shapes -> native profile shapes

def to_profile_education(entry: EducationLike) -> Education:
    return Education(
        id=synthetic_id("resume-edu"),
        institution=entry.institution.strip(),
        degree=entry.degree.strip(),
        field=entry.field or "",
        startYear=parse_year(entry.startYear),
        endYear=parse_year(entry.endYear),
        grade=entry.grade,
        current=entry.current,
    )


def to_profile_experience(entry: ExperienceLike) -> Experience:
    if isinstance(entry, Experience):
        description = entry.description
        skills = list(entry.skills)
    else:
        description = entry.description or "\n".join(entry.highlights)
        skills = []
    return Experience(
        id=synthetic_id("resume-exp"),
        company=entry.company.strip(),
        role=entry.role.strip(),
        description=description or "",
        startDate=entry.startDate or "",
        endDate=entry.endDate,
        current=entry.current,
        skills=skills,
    )


def to_profile_project(entry: ProjectLike) -> Project:
    return Project(
        id=synthetic_id("resume-proj"),
        title=entry.title.strip(),
        description=entry.description or "",
        technologies=list(entry.technologies),
        link=entry.link,
    )


# Merges

def merge_skills(manual_skills: Iterable[SkillLike], resume_skills: Iterable[SkillLike]) -> List[MergedSkill]:
    merged = {}
    for skill in manual_skills:
        name = skill_name(skill)
        key = normalize_key(name)
        if key and key not in merged:
            merged[key] = MergedSkill(skill=name, source="manual")

    for skill in resume_skills:
        name = skill_name(skill)
        key = normalize_key(name)
        if not key:
            continue
        existing = merged.get(key)
        if existing is None:
            merged[key] = MergedSkill(skill=name, source="resume")
        elif existing.source == "manual":
            existing.source = "both"

    return list(merged.values())


def _merge_entries(category, manual_items, resume_items, convert, merged_cls):
    merged = []
    seen = set()
    for item in manual_items:
        seen.add(item_key(category, item))
        merged.append(merged_cls(**_native_fields(item), source="manual"))

    for item in resume_items:
        key = item_key(category, item)
        if key in seen:
            continue
        seen.add(key)
        merged.append(merged_cls(**convert(item).model_dump(), source="resume"))
    return merged


def _native_fields(item) -> dict:
    return item.model_dump(exclude={"source"})


def merge_education(manual: Sequence[Education], resume: Sequence[EducationLike]) -> List[MergedEducation]:
    return _merge_entries("education", manual, resume, to_profile_education, MergedEducation)


def merge_experience(manual: Sequence[Experience], resume: Sequence[ExperienceLike]) -> List[MergedExperience]:
    return _merge_entries("experience", manual, resume, to_profile_experience, MergedExperience)


def merge_projects(manual: Sequence[Project], resume: Sequence[ProjectLike]) -> List[MergedProject]:
    return _merge_entries("projects", manual, resume, to_profile_project, MergedProject)


_MERGERS = {
    "skills": merge_skills,
    "education": merge_education,
    "experience": merge_experience,
    "projects": merge_projects,
}


def reconcile(category: str, manual_items: Sequence, extracted_items: Sequence, strategy: str) -> list:
    """Combine one category of manual and extracted entries under the chosen strategy.

    ``profile`` keeps the manual entries, ``resume`` keeps only the extracted
    entries (with fresh ids) and ``merge`` unions both by content key.
    """
    if category not in _MERGERS:
        raise ValidationError(f"Unknown profile category: {category}")
    if strategy not in STRATEGIES:
        raise ValidationError(f"Unknown merge strategy: {strategy}")

    merge = _MERGERS[category]
    if strategy == "profile":
        if category == "skills":
            return [MergedSkill(skill=skill_name(s), source="manual") for s in manual_items]
        return merge(manual_items, [])
    if strategy == "resume":
        return merge([], extracted_items)
    return merge(manual_items, extracted_items)


def to_native_items(category: str, merged: Sequence) -> list:
    """Strip source tags so a merged list can be written into a profile field."""
    if category == "skills":
        return unique_skills(merged)
    native_cls = {"education": Education, "experience": Experience, "projects": Project}[category]
    return [native_cls.model_validate(_native_fields(item)) for item in merged]


def _remove(category: str, items: Sequence, key: str) -> list:
    target = normalize_removal_key(category, key)
    return [item for item in items if item_key(category, item) != target]


def remove_from_shadow(category: str, shadow_items: Sequence, key: str) -> list:
    """Drop an entry from a resumeExtracted* field so it does not reappear in the merged view."""
    return _remove(category, shadow_items, key)


def remove_from_manual(category: str, manual_items: Sequence, key: str) -> list:
    return _remove(category, manual_items, key)


def unique_skills(merged: Sequence[MergedSkill]) -> List[str]:
    return [m.skill for m in merged]


def resume_only_count(items: Sequence) -> int:
    return sum(1 for item in items if item.source == "resume")
