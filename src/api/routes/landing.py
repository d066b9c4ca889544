"""
Landing page content and the lead-magnet form.
"""

import logging
from typing import Optional

from fastapi import APIRouter, status
from pydantic import BaseModel, Field

from ...core.landing.content import LEAD_MAGNET_CONFIRMATION, PROCESS_STEPS, TESTIMONIALS
from ..dependencies import SettingsDep

logger = logging.getLogger(__name__)

router = APIRouter()


class ProcessStepItem(BaseModel):
    icon: str
    title: str
    description: str
    highlight: bool = False


class TestimonialItem(BaseModel):
    name: str
    quote: str
    result: str


class LandingContentResponse(BaseModel):
    hero_image: str
    hero_video: Optional[str] = None
    transformation_before: str
    transformation_after: str
    process: list[ProcessStepItem]
    testimonials: list[TestimonialItem]


class LeadMagnetRequest(BaseModel):
    email: str = Field(min_length=3, max_length=320)


class LeadMagnetResponse(BaseModel):
    message: str


@router.get(
    "/content",
    response_model=LandingContentResponse,
    status_code=status.HTTP_200_OK,
    summary="Landing page media and copy",
)
async def get_content(settings: SettingsDep) -> LandingContentResponse:
    content = settings.site_content
    return LandingContentResponse(
        hero_image=content.hero_image,
        hero_video=content.hero_video,
        transformation_before=content.transformation_before,
        transformation_after=content.transformation_after,
        process=[ProcessStepItem(**vars(step)) for step in PROCESS_STEPS],
        testimonials=[TestimonialItem(**vars(t)) for t in TESTIMONIALS],
    )


@router.post(
    "/lead-magnet",
    response_model=LeadMagnetResponse,
    status_code=status.HTTP_200_OK,
    summary="Request the free guide",
    description="Shows a confirmation only. The email is not stored.",
)
async def request_guide(request: LeadMagnetRequest) -> LeadMagnetResponse:
    logger.debug("Lead magnet form submitted")
    return LeadMagnetResponse(message=LEAD_MAGNET_CONFIRMATION)
