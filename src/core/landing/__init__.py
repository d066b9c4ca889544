"""
Public landing page: static content, sign-in, and the hidden demo gesture.
"""

from .content import (
    LEAD_MAGNET_CONFIRMATION,
    PROCESS_STEPS,
    TESTIMONIALS,
    ProcessStep,
    SiteContent,
    Testimonial,
)
from .gesture import LogoGesture
from .signin import NOT_CONFIGURED_MESSAGE, SignInForm, SignInOutcome

__all__ = [
    "LEAD_MAGNET_CONFIRMATION",
    "PROCESS_STEPS",
    "TESTIMONIALS",
    "ProcessStep",
    "SiteContent",
    "Testimonial",
    "LogoGesture",
    "NOT_CONFIGURED_MESSAGE",
    "SignInForm",
    "SignInOutcome",
]
