"""
Prompt construction

Pure functions only: the same profile and snapshot always give byte-identical
prompts. Absent snapshot fields are left out entirely, never filled in.
"""
from typing import List, Optional, Sequence

from models.job import BuiltPrompt, JobSnapshot
from models.profile import Profile
from utils.data_utils import truncate

PREVIEW_DESCRIPTION_LIMIT = 2000
PROMPT_DESCRIPTION_LIMIT = 8000

OUTPUT_SCHEMA = [
    "{",
    '  "shouldApply": boolean,',
    '  "fitScore": number,',
    '  "keyReasons": string[],',
    '  "risks": string[],',
    '  "questionsToAsk": string[],',
    '  "proposalShort": string,',
    '  "proposalFull": string,',
    '  "bidSuggestion": string',
    "}",
]


def _line(label: str, value: Optional[str]) -> Optional[str]:
    return f"{label}: {value}" if value else None


def _bullets(items: Optional[Sequence[str]]) -> List[str]:
    return [f"- {item}" for item in items or []]


def collapse_blank_lines(lines: List[Optional[str]]) -> List[str]:
    """Drop absent (None) lines and squeeze each run of "" separators into one blank line"""
    collapsed: List[str] = []
    last_blank = False
    for line in lines:
        if line is None:
            continue
        if line == "":
            if not last_blank:
                collapsed.append("")
            last_blank = True
        else:
            collapsed.append(line)
            last_blank = False
    return collapsed


def _client_lines(job: JobSnapshot) -> List[str]:
    lines: List[Optional[str]] = []
    if job.client_payment_verified is not None:
        lines.append(f"Payment verified: {'Yes' if job.client_payment_verified else 'No'}")
    lines += [
        _line("Client rating", job.client_rating),
        _line("Reviews", job.client_review_count),
        _line("Client location", job.client_location),
        _line("Jobs posted", job.client_jobs_posted),
        _line("Hire rate", job.client_hire_rate),
        _line("Open jobs", job.client_open_jobs),
        _line("Total spent", job.client_total_spent),
    ]
    if job.client_total_hires:
        active = f", {job.client_active_hires} active" if job.client_active_hires else ""
        lines.append(f"Total hires: {job.client_total_hires}{active}")
    else:
        lines.append(_line("Active hires", job.client_active_hires))
    lines += [
        _line("Avg hourly rate paid", job.client_avg_hourly_rate),
        _line("Total hours", job.client_total_hours),
        _line("Industry", job.client_industry),
        _line("Company size", job.client_company_size),
        _line("Member since", job.client_member_since),
    ]
    lines = [line for line in lines if line]
    return ["Client Info:"] + lines if lines else []


def job_fact_lines(job: JobSnapshot) -> List[Optional[str]]:
    """Labeled lines for the title and every present optional field, grouped by section"""
    return [
        f"Title: {job.title}",
        _line("Posted", job.posted_date),
        _line("Job location", job.job_location),
        _line("Budget", job.budget_text),
        _line("Experience", job.experience_level),
        _line("Project type", job.project_type),
        _line("Skills", ", ".join(job.skills or [])),
        "",
        # Activity
        _line("Proposals", job.proposals),
        _line("Last viewed by client", job.last_viewed_by_client),
        _line("Hires", job.hires),
        _line("Interviewing", job.interviewing),
        _line("Invites sent", job.invites_sent),
        _line("Unanswered invites", job.unanswered_invites),
        _line("Bid range", job.bid_range),
        "",
        # Connects
        _line("Connects to submit", job.connects_required),
        _line("Available connects", job.connects_available),
        "",
        *_client_lines(job),
        "",
    ]


def format_job_preview(job: JobSnapshot) -> str:
    """
    Human-readable summary of a snapshot for display

    Args:
        job: Extracted snapshot

    Returns:
        One labeled line per present field followed by the description,
        truncated for display
    """
    lines = job_fact_lines(job) + [truncate(job.description, PREVIEW_DESCRIPTION_LIMIT)]
    return "\n".join(collapse_blank_lines(lines)).strip()


def build_instructions(profile: Profile) -> str:
    lines = [
        "You are an Upwork job application assistant.",
        "Return STRICT JSON only. No markdown. No extra text.",
        "",
        "Your task: decide if the user should apply and draft proposals aligned with the user mindset.",
        "",
        f"User profile name: {profile.profile_name}",
        f"Role title: {profile.role_title}",
    ]
    if profile.experience:
        lines.append(f"Experience: {profile.experience}")
    if profile.location:
        lines.append(f"Location: {profile.location}")
    lines += [
        f"Core skills: {', '.join(profile.core_skills)}",
        f"Secondary skills: {', '.join(profile.secondary_skills)}",
        f"No-go skills (if heavily required then recommend SKIP): {', '.join(profile.no_go_skills)}",
        "",
        "Proposal style rules:",
        *_bullets(profile.proposal_style_rules),
        "",
        "Red flags to watch for:",
        *_bullets(profile.red_flags),
        "",
        "Output JSON schema:",
        *OUTPUT_SCHEMA,
    ]
    return "\n".join(lines)


def build_input(job: JobSnapshot) -> str:
    lines = [
        "Analyze this Upwork job and produce the JSON output schema exactly.",
        "",
        f"URL: {job.url}",
        *job_fact_lines(job),
    ]
    if job.preferred_qualifications:
        lines += ["Preferred qualifications:", *_bullets(job.preferred_qualifications), ""]
    if job.required_questions:
        lines += ["Screening questions the proposal must answer:", *_bullets(job.required_questions), ""]
    lines += [
        "Description:",
        truncate(job.description, PROMPT_DESCRIPTION_LIMIT),
    ]
    return "\n".join(collapse_blank_lines(lines)).strip()


def build_prompt(profile: Profile, job: JobSnapshot) -> BuiltPrompt:
    """
    Build the instructions/input pair sent to the provider

    Args:
        profile: User mindset, read-only
        job: Extracted snapshot

    Returns:
        BuiltPrompt with the profile-driven instructions and the job input
    """
    return BuiltPrompt(instructions=build_instructions(profile), input=build_input(job))
