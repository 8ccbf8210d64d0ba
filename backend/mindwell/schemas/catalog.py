"""Response shapes for the mindfulness session and reflection prompt catalog."""

from typing import Optional

from pydantic import Field

from mindwell.schemas.common import CamelModel


class MindfulnessSessionResponse(CamelModel):
    id: int
    title: str
    description: Optional[str] = None
    duration: int = Field(description="Length in minutes")
    audio_url: str
    is_premium: bool


class ReflectionPromptResponse(CamelModel):
    id: int
    prompt: str
    is_premium: bool
