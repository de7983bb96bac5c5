from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import List, Optional


class Profile(BaseModel):
    """User-authored mindset used to judge jobs and draft proposals.

    List order is significant: items are rendered as ordered bullets.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    profile_name: str = Field(..., description="Name to sign proposals with")
    role_title: str = Field(..., description="Headline role, e.g. 'Full-stack Web Developer'")
    experience: Optional[str] = Field(None, description="Years of experience, e.g. '2+ years'")
    location: Optional[str] = None
    core_skills: List[str] = Field(default_factory=list)
    secondary_skills: List[str] = Field(default_factory=list)
    no_go_skills: List[str] = Field(default_factory=list)
    proposal_style_rules: List[str] = Field(default_factory=list)
    red_flags: List[str] = Field(default_factory=list)


DEFAULT_PROFILE = Profile(
    profile_name="Freelancer",
    role_title="Full-stack Web Developer (React/TypeScript/Node.js)",
    experience="2+ years",
    core_skills=[
        "JavaScript",
        "TypeScript",
        "React",
        "Next.js",
        "TailwindCSS",
        "Node.js",
        "Express.js",
        "MongoDB",
        "PostgreSQL",
        "REST APIs",
        "Debugging",
    ],
    secondary_skills=[
        "Redux Toolkit",
        "TanStack Query",
        "Vue.js",
        "Vite",
        "Mongoose",
        "NestJS",
        "Zod",
        "Prisma",
    ],
    no_go_skills=[
        "Figma UI/UX design",
        "WordPress page builders",
        "PHP, Laravel and any other non-JavaScript backend/frontend",
        "Mobile app development (React Native, Flutter, etc.)",
    ],
    proposal_style_rules=[
        "Be short and direct. No fluff.",
        "Emphasize speed and precision with clear scope boundaries.",
        "Ask 3-6 targeted questions.",
        "If scope is vague, propose a small paid discovery first.",
    ],
    red_flags=[
        "Unrealistic deadlines with very low budget",
        "Vague scope with pressure to commit upfront",
        "Requests for free work or unpaid trials",
        "Suspicious links or credentials requests",
    ],
)
