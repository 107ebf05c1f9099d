import pytest

from placement.core.errors import ValidationError
from placement.schemas.ProfileSchemas import Education, Experience, Project
from placement.schemas.ResumeSchemas import ExtractedEducation, ExtractedExperience, ExtractedProject
from placement.services import profile_merge as pm


def _keys(category, items):
    return sorted(pm.item_key(category, i) for i in items)


class TestMergeSkills:

    def test_union_is_case_insensitive_and_tags_both(self):
        merged = pm.merge_skills(["Python", "Leadership"], [" python ", "SQL", "sql"])
        assert [(m.skill, m.source) for m in merged] == [
            ("Python", "both"),
            ("Leadership", "manual"),
            ("SQL", "resume"),
        ]

    @pytest.mark.parametrize("manual, resume", [
        ([], []),
        (["a", "B"], ["b", "c"]),
        (["Go", "go ", "Rust"], ["RUST", "Zig", "zig"]),
        ([], ["X", "x", "Y"]),
    ])
    def test_size_equals_case_insensitive_union(self, manual, resume):
        merged = pm.merge_skills(manual, resume)
        expected = {s.lower().strip() for s in manual} | {s.lower().strip() for s in resume}
        assert len(merged) == len(expected)
        both = {m.skill.lower().strip() for m in merged if m.source == "both"}
        assert both == {s.lower().strip() for s in manual} & {s.lower().strip() for s in resume}

    def test_unique_skills_and_resume_only_count(self):
        merged = pm.merge_skills(["Python"], ["python", "Docker"])
        assert pm.unique_skills(merged) == ["Python", "Docker"]
        assert pm.resume_only_count(merged) == 1


class TestMergeEntries:

    def test_education_key_ignores_case_and_whitespace(self):
        manual = [Education(id="m1", institution="MIT", degree="BS")]
        resume = [ExtractedEducation(institution=" mit ", degree="bs", startYear="2019")]
        merged = pm.merge_education(manual, resume)
        assert len(merged) == 1
        assert merged[0].id == "m1"
        assert merged[0].source == "manual"

    def test_experience_resume_only_entries_get_native_shape(self):
        resume = [ExtractedExperience(company="Acme", role="Intern", highlights=["Built a CLI"], startDate="Jun 2022")]
        merged = pm.merge_experience([], resume)
        assert merged[0].id.startswith("resume-exp-")
        assert merged[0].description == "Built a CLI"
        assert merged[0].startDate == "Jun 2022"
        assert merged[0].source == "resume"

    def test_projects_dedup_by_title(self):
        manual = [Project(id="p1", title="Parser")]
        resume = [ExtractedProject(title="PARSER "), ExtractedProject(title="Bot"), ExtractedProject(title="bot")]
        merged = pm.merge_projects(manual, resume)
        assert [(p.title, p.source) for p in merged] == [("Parser", "manual"), ("Bot", "resume")]

    def test_year_parsing(self):
        edu = pm.to_profile_education(ExtractedEducation(institution="MIT", degree="BS", startYear="Aug 2019", endYear="Present"))
        assert edu.startYear == 2019
        assert edu.endYear is None
        assert edu.id.startswith("resume-edu-")


class TestReconcile:

    manual = [Experience(id="e1", company="Acme", role="Intern")]
    extracted = [
        ExtractedExperience(company=" acme", role="INTERN"),
        ExtractedExperience(company="Globex", role="Engineer"),
    ]

    def test_profile_strategy_keeps_manual_unchanged(self):
        result = pm.reconcile("experience", self.manual, self.extracted, "profile")
        assert [(r.id, r.source) for r in result] == [("e1", "manual")]

    def test_profile_strategy_keeps_manual_skill_variants(self):
        result = pm.reconcile("skills", ["Python", "python"], ["Docker"], "profile")
        assert [(r.skill, r.source) for r in result] == [("Python", "manual"), ("python", "manual")]

    def test_resume_strategy_discards_manual(self):
        result = pm.reconcile("experience", self.manual, self.extracted, "resume")
        assert [r.company for r in result] == ["acme", "Globex"]
        assert all(r.source == "resume" and r.id.startswith("resume-exp-") for r in result)

    def test_merge_is_idempotent(self):
        once = pm.reconcile("experience", self.manual, self.extracted, "merge")
        twice = pm.reconcile("experience", once, self.extracted, "merge")
        assert _keys("experience", once) == _keys("experience", twice)
        assert len(once) == 2

    def test_merge_with_empty_extracted_returns_manual(self):
        result = pm.reconcile("experience", self.manual, [], "merge")
        assert [r.id for r in result] == ["e1"]

    def test_merge_with_empty_manual_behaves_like_resume(self):
        result = pm.reconcile("experience", [], self.extracted, "merge")
        assert all(r.source == "resume" for r in result)
        assert len({r.id for r in result}) == 2

    def test_skill_merge_idempotent(self):
        once = pm.reconcile("skills", ["Python"], ["python", "SQL"], "merge")
        twice = pm.reconcile("skills", once, ["python", "SQL"], "merge")
        assert _keys("skills", once) == _keys("skills", twice)

    def test_unknown_category_or_strategy(self):
        with pytest.raises(ValidationError):
            pm.reconcile("hobbies", [], [], "merge")
        with pytest.raises(ValidationError):
            pm.reconcile("skills", [], [], "overwrite")

    def test_native_items_drop_source_tags(self):
        merged = pm.reconcile("experience", self.manual, self.extracted, "merge")
        native = pm.to_native_items("experience", merged)
        assert all(type(n) is Experience for n in native)


class TestRemoval:

    def test_shadow_and_manual_removals_are_independent(self):
        shadow = [Education(id="r1", institution="MIT", degree="BS"), Education(id="r2", institution="CMU", degree="MS")]
        manual = [Education(id="m1", institution="MIT", degree="BS")]

        new_shadow = pm.remove_from_shadow("education", shadow, " mit | bs ")
        assert [e.id for e in new_shadow] == ["r2"]
        assert [e.id for e in manual] == ["m1"]

        new_manual = pm.remove_from_manual("education", manual, "MIT|BS")
        assert new_manual == []

    def test_skill_removal(self):
        assert pm.remove_from_shadow("skills", ["Python", "SQL"], "python") == ["SQL"]

    def test_malformed_compound_key(self):
        with pytest.raises(ValidationError):
            pm.remove_from_manual("experience", [], "Acme")
