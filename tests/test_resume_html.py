from placement.schemas.ResumeSchemas import ExtractedResumeData
from placement.services.resume_html import render_resume_html


def test_rendering_is_deterministic(extracted_data):
    assert render_resume_html(extracted_data) == render_resume_html(extracted_data.model_copy(deep=True))


def test_sections_present_for_populated_data(extracted_data):
    html = render_resume_html(extracted_data)
    for title in ("Professional Summary", "Education", "Experience", "Projects", "Skills"):
        assert f'<div class="section-title">{title}</div>' in html
    assert '<span class="skill">Docker</span>' in html
    assert "BS in Computer Science" in html


def test_empty_sections_are_omitted():
    html = render_resume_html(ExtractedResumeData())
    assert "section-title" not in html
    assert "Your Name" in html


def test_content_is_escaped():
    data = ExtractedResumeData.model_validate({
        "personalInfo": {"name": "<script>alert(1)</script>"},
        "experience": [{"company": "A&B", "role": "Dev", "description": "line one\nline <two>"}],
    })
    html = render_resume_html(data)
    assert "<script>" not in html
    assert "A&amp;B" in html
    assert "line one<br>line &lt;two&gt;" in html


def test_current_role_shows_present():
    data = ExtractedResumeData.model_validate({
        "experience": [{"company": "Acme", "role": "Engineer", "startDate": "2023", "current": True}],
    })
    assert "2023 - Present" in render_resume_html(data)


def test_accepts_plain_dicts(extracted_data):
    assert render_resume_html(extracted_data.model_dump()) == render_resume_html(extracted_data)
