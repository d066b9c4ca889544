"""
Static content for the public landing page.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class SiteContent:
    """Media URLs for the landing page. Fixed for the life of the process."""
    hero_image: str
    transformation_before: str
    transformation_after: str
    hero_video: Optional[str] = None


@dataclass(frozen=True)
class ProcessStep:
    icon: str
    title: str
    description: str
    highlight: bool = False


@dataclass(frozen=True)
class Testimonial:
    name: str
    quote: str
    result: str


PROCESS_STEPS = (
    ProcessStep(
        icon="fa-clipboard-list",
        title="1. Analyze",
        description=(
            "We start with a deep dive. Intake forms, bloodwork analysis, and lifestyle "
            "assessment to understand your starting point and metabolic health."
        ),
    ),
    ProcessStep(
        icon="fa-dna",
        title="2. Blueprint",
        description=(
            "You get a custom roadmap. Precision meal plans, progressive training blocks, "
            "and supplement protocols tailored to your specific biology."
        ),
        highlight=True,
    ),
    ProcessStep(
        icon="fa-trophy",
        title="3. Evolve",
        description=(
            "We execute and adjust. Bi-weekly check-ins, data-driven adjustments, and "
            "constant communication ensure you never plateau."
        ),
    ),
)

TESTIMONIALS = (
    Testimonial(
        name="Marcus T.",
        quote="The meal plans actually fit my shift work. First time I've stuck with anything.",
        result="-18 kg in 16 weeks",
    ),
    Testimonial(
        name="Dana R.",
        quote="Bloodwork-driven adjustments made all the difference going into my first show.",
        result="1st place, novice physique",
    ),
    Testimonial(
        name="Chris L.",
        quote="Check-ins every two weeks kept me honest. Broke a two-year plateau on every lift.",
        result="+40 kg total",
    ),
)

LEAD_MAGNET_CONFIRMATION = "Guide sent! Check your inbox for the free transformation guide."
