"""Deterministic HTML rendering of structured resume data.

The output is a pure function of the input: no timestamps, no random ids.
A section is omitted entirely when its source list or field is empty.
"""
from functools import lru_cache
from typing import Any, Dict, Union

from jinja2 import Environment, select_autoescape

from placement.schemas.ResumeSchemas import ExtractedResumeData

RESUME_CSS = """
* { margin: 0; padding: 0; box-sizing: border-box; }
body { font-family: 'Arial', sans-serif; font-size: 11pt; line-height: 1.4; color: #000; padding: 40px; }
.header { border-bottom: 2px solid #000; padding-bottom: 10px; margin-bottom: 20px; }
.name { font-size: 24pt; font-weight: bold; margin-bottom: 5px; }
.contact { font-size: 10pt; color: #333; }
.contact span { margin-right: 10px; }
.section { margin-bottom: 20px; }
.section-title { font-size: 14pt; font-weight: bold; border-bottom: 1px solid #333; padding-bottom: 3px; margin-bottom: 10px; text-transform: uppercase; }
.entry { margin-bottom: 12px; }
.entry-header { display: flex; justify-content: space-between; margin-bottom: 3px; }
.entry-title { font-weight: bold; }
.entry-subtitle { color: #333; font-size: 10pt; }
.entry-date { color: #666; font-size: 10pt; }
.entry-description { margin-top: 5px; text-align: justify; }
.highlights { margin-left: 20px; margin-top: 5px; }
.skills-container { display: flex; flex-wrap: wrap; gap: 8px; }
.skill { background: #f0f0f0; padding: 4px 10px; border-radius: 3px; font-size: 10pt; }
ul { margin-left: 20px; margin-top: 5px; }
li { margin-bottom: 3px; }
a { color: #0066cc; text-decoration: none; }
"""

RESUME_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
<meta charset="UTF-8">
<style>{{ css | safe }}</style>
</head>
<body>
<div class="header">
<div class="name">{{ info.name or "Your Name" }}</div>
{%- set contact = [info.email, info.phone, info.location] | select | list %}
{%- if contact %}
<div class="contact">{% for item in contact %}{% if not loop.first %}<span>&bull;</span>{% endif %}<span>{{ item }}</span>{% endfor %}</div>
{%- endif %}
{%- if info.linkedin or info.github or info.portfolio %}
<div class="contact">
{%- if info.linkedin %}<span><a href="{{ info.linkedin }}">LinkedIn</a></span>{% endif %}
{%- if info.github %}<span><a href="{{ info.github }}">GitHub</a></span>{% endif %}
{%- if info.portfolio %}<span><a href="{{ info.portfolio }}">Portfolio</a></span>{% endif %}
</div>
{%- endif %}
</div>
{%- if info.summary %}
<div class="section">
<div class="section-title">Professional Summary</div>
<p>{{ info.summary }}</p>
</div>
{%- endif %}
{%- if education %}
<div class="section">
<div class="section-title">Education</div>
{%- for edu in education %}
<div class="entry">
<div class="entry-header">
<div>
<div class="entry-title">{{ edu.institution }}</div>
<div class="entry-subtitle">{{ edu.degree }}{% if edu.field %} in {{ edu.field }}{% endif %}</div>
</div>
<div>
{%- if edu.startYear or edu.endYear or edu.current %}
<div class="entry-date">{{ edu.startYear or "" }} - {{ "Present" if edu.current else (edu.endYear or "") }}</div>
{%- endif %}
{%- if edu.grade %}
<div class="entry-date">Grade: {{ edu.grade }}</div>
{%- endif %}
</div>
</div>
</div>
{%- endfor %}
</div>
{%- endif %}
{%- if experience %}
<div class="section">
<div class="section-title">Experience</div>
{%- for exp in experience %}
<div class="entry">
<div class="entry-header">
<div>
<div class="entry-title">{{ exp.role }}</div>
<div class="entry-subtitle">{{ exp.company }}</div>
</div>
{%- if exp.startDate or exp.endDate or exp.current %}
<div class="entry-date">{{ exp.startDate or "" }} - {{ "Present" if exp.current else (exp.endDate or "") }}</div>
{%- endif %}
</div>
{%- if exp.description %}
<div class="entry-description">{{ exp.description | e | replace("\\n", "<br>" | safe) }}</div>
{%- endif %}
{%- if exp.highlights %}
<ul class="highlights">
{%- for highlight in exp.highlights %}
<li>{{ highlight }}</li>
{%- endfor %}
</ul>
{%- endif %}
</div>
{%- endfor %}
</div>
{%- endif %}
{%- if projects %}
<div class="section">
<div class="section-title">Projects</div>
{%- for proj in projects %}
<div class="entry">
<div class="entry-header">
<div class="entry-title">{{ proj.title }}</div>
{%- if proj.link %}
<a href="{{ proj.link }}" class="entry-date">Link</a>
{%- endif %}
</div>
{%- if proj.description %}
<div class="entry-description">{{ proj.description }}</div>
{%- endif %}
{%- if proj.technologies %}
<div class="entry-subtitle">Technologies: {{ proj.technologies | join(", ") }}</div>
{%- endif %}
</div>
{%- endfor %}
</div>
{%- endif %}
{%- if skills %}
<div class="section">
<div class="section-title">Skills</div>
<div class="skills-container">{% for skill in skills %}<span class="skill">{{ skill }}</span>{% endfor %}</div>
</div>
{%- endif %}
{%- if certifications %}
<div class="section">
<div class="section-title">Certifications</div>
{%- for cert in certifications %}
<div class="entry">
<div class="entry-header">
<div>
<div class="entry-title">{{ cert.name }}</div>
{%- if cert.issuer %}
<div class="entry-subtitle">{{ cert.issuer }}</div>
{%- endif %}
</div>
{%- if cert.date %}
<div class="entry-date">{{ cert.date }}</div>
{%- endif %}
</div>
</div>
{%- endfor %}
</div>
{%- endif %}
{%- if achievements %}
<div class="section">
<div class="section-title">Achievements</div>
<ul>
{%- for achievement in achievements %}
<li>{{ achievement.title }}{% if achievement.description %} - {{ achievement.description }}{% endif %}</li>
{%- endfor %}
</ul>
</div>
{%- endif %}
</body>
</html>
"""


@lru_cache()
def _get_template():
    env = Environment(autoescape=select_autoescape(["html", "xml"]))
    return env.from_string(RESUME_TEMPLATE)


def render_resume_html(data: Union[ExtractedResumeData, Dict[str, Any]]) -> str:
    """Render resume data (extracted or improved) into a standalone HTML document."""
    if not isinstance(data, ExtractedResumeData):
        data = ExtractedResumeData.model_validate(data)
    return _get_template().render(
        css=RESUME_CSS,
        info=data.personalInfo,
        education=data.education,
        experience=data.experience,
        projects=data.projects,
        skills=data.skills,
        certifications=data.certifications,
        achievements=data.achievements,
    )
