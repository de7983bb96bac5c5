import pytest
import sys
import os

# Add the parent directory to sys.path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from extractors.upwork import extract_job
from models.job import JobSnapshot
from models.profile import DEFAULT_PROFILE, Profile
from utils.prompt_builder import build_prompt, format_job_preview

FIXTURES = os.path.join(os.path.dirname(os.path.abspath(__file__)), "fixtures")
JOB_URL = "https://www.upwork.com/jobs/~0123456789abcdef"


@pytest.fixture
def profile():
    return Profile(
        profile_name="Sam",
        role_title="Python Backend Developer",
        core_skills=["Python", "FastAPI"],
        secondary_skills=["Docker"],
        no_go_skills=["PHP"],
        proposal_style_rules=["Keep it short.", "Ask about deadlines."],
        red_flags=["Unpaid test tasks"],
    )


@pytest.fixture
def minimal_job():
    return JobSnapshot(
        url=JOB_URL,
        title="Write an ETL script",
        description="Load CSV files into Postgres.",
    )


def _lines(text):
    return text.split("\n")


def test_prompt_is_deterministic(profile, minimal_job):
    first = build_prompt(profile, minimal_job)
    second = build_prompt(profile, minimal_job)

    assert first.instructions == second.instructions
    assert first.input == second.input


def test_instructions_carry_profile(profile, minimal_job):
    instructions = build_prompt(profile, minimal_job).instructions

    assert "Return STRICT JSON only. No markdown. No extra text." in instructions
    assert "User profile name: Sam" in instructions
    assert "Core skills: Python, FastAPI" in instructions
    assert "No-go skills (if heavily required then recommend SKIP): PHP" in instructions
    assert "- Keep it short.\n- Ask about deadlines." in instructions
    assert "- Unpaid test tasks" in instructions
    assert '"fitScore": number,' in instructions
    # Optional profile fields are left out when not set
    assert "Experience:" not in instructions
    assert "Location:" not in instructions


def test_minimal_job_has_no_optional_labels(profile, minimal_job):
    lines = _lines(build_prompt(profile, minimal_job).input)

    assert f"URL: {JOB_URL}" in lines
    assert "Title: Write an ETL script" in lines
    assert lines[-2:] == ["Description:", "Load CSV files into Postgres."]
    for label in ("Budget:", "Skills:", "Proposals:", "Hires:", "Connects to submit:", "Client Info:"):
        assert not any(line.startswith(label) for line in lines)


def test_no_consecutive_blank_lines(profile, minimal_job):
    text = build_prompt(profile, minimal_job).input

    assert "\n\n\n" not in text


def test_extracted_job_prompt(profile):
    with open(os.path.join(FIXTURES, "upwork_job.html"), "r", encoding="utf-8") as f:
        job = extract_job(f.read(), JOB_URL)

    lines = _lines(build_prompt(profile, job).input)

    assert "Budget: $500 (Fixed-price)" in lines
    assert "Experience: Intermediate" in lines
    assert "Skills: React, TypeScript" in lines
    assert "Proposals: 5 to 10" in lines
    assert "Connects to submit: 16" in lines
    assert "Client Info:" in lines
    assert "Payment verified: Yes" in lines
    assert "Total hires: 9, 2 active" in lines
    assert "Screening questions the proposal must answer:" in lines
    assert "- What is your availability?" in lines
    # Hires is not on the page, so its label is not in the prompt
    assert not any(line.startswith("Hires:") for line in lines)


def test_payment_not_verified_is_rendered(profile):
    job = JobSnapshot(url=JOB_URL, title="T", description="D", client_payment_verified=False)
    lines = _lines(build_prompt(profile, job).input)

    assert "Client Info:" in lines
    assert "Payment verified: No" in lines


def test_prompt_truncates_long_description(profile):
    job = JobSnapshot(url=JOB_URL, title="T", description="x" * 9000)
    text = build_prompt(profile, job).input

    assert text.endswith("x" * 8000 + "...")


def test_absent_fields_leave_no_blank_lines():
    job = JobSnapshot(
        url=JOB_URL,
        title="Sparse job",
        description="D",
        project_type="Ongoing project",
        hires="1",
        client_industry="Retail",
    )

    assert format_job_preview(job) == (
        "Title: Sparse job\n"
        "Project type: Ongoing project\n"
        "\n"
        "Hires: 1\n"
        "\n"
        "Client Info:\n"
        "Industry: Retail\n"
        "\n"
        "D"
    )


def test_input_sections_are_contiguous(profile):
    job = JobSnapshot(url=JOB_URL, title="T", description="D", posted_date="1 hour ago", budget_text="$50")
    text = build_prompt(profile, job).input

    assert f"URL: {JOB_URL}\nTitle: T\nPosted: 1 hour ago\nBudget: $50\n\nDescription:\nD" in text


def test_preview_truncates_description(minimal_job):
    job = JobSnapshot(url=JOB_URL, title="Long one", description="y" * 2500, budget_text="$50")
    preview = format_job_preview(job)

    assert preview.startswith("Title: Long one\nBudget: $50")
    assert preview.endswith("y" * 2000 + "...")
    assert format_job_preview(minimal_job) == "Title: Write an ETL script\n\nLoad CSV files into Postgres."


def test_default_profile_builds():
    job = JobSnapshot(url=JOB_URL, title="T", description="D")
    instructions = build_prompt(DEFAULT_PROFILE, job).instructions

    assert "User profile name: Freelancer" in instructions
    assert "Experience: 2+ years" in instructions
