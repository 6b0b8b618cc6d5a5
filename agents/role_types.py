"""
Data types for the dynamic multi-agent writing system.

Every model accepts both snake_case and camelCase keys so structured model
replies can use either spelling.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class SynthesisStrategy(str, Enum):
    """How agent outputs are combined into the final document."""
    INTERLEAVING = "interleaving"  # Mix sections from different agents
    LAYERING = "layering"  # Stack outputs sequentially
    HIGHLIGHTING = "highlighting"  # Present side-by-side
    BLENDING = "blending"  # Create new content inspired by all agents


DEFAULT_SYNTHESIS_STRATEGY = SynthesisStrategy.BLENDING


class _WritingModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class RoleConstraints(_WritingModel):
    max_length: Optional[int] = None
    tone: Optional[str] = None
    focus_areas: Optional[List[str]] = None


class RoleDefinition(_WritingModel):
    """One writing perspective."""
    id: str  # e.g. "technical_expert"
    name: str  # e.g. "Technical Expert"
    description: str
    prompt_template: str
    priority: int = Field(ge=1, description="1 = highest, executed and kept first")
    constraints: Optional[RoleConstraints] = None


class RoleAnalysis(_WritingModel):
    """Result of role analysis."""
    identified_roles: List[RoleDefinition]
    reasoning: str
    confidence: float = Field(ge=0.0, le=1.0)


class AgentOutput(_WritingModel):
    """Output from a single agent."""
    role_id: str
    role_name: str
    role_description: str
    content: str  # Markdown content
    reasoning: str
    confidence: float = Field(ge=0.0, le=1.0)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("content")
    @classmethod
    def _content_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("content must not be empty")
        return value


class UserConstraints(_WritingModel):
    """Caller constraints for content generation."""
    max_length: Optional[int] = Field(default=None, gt=0)
    tone: Optional[str] = Field(default=None, max_length=100)
    target_audience: Optional[str] = Field(default=None, max_length=200)
    preferred_roles: Optional[List[str]] = Field(default=None, max_length=4)
    synthesis_strategy: Optional[SynthesisStrategy] = None


class WritingRequest(_WritingModel):
    """A validated writing request as accepted from callers."""
    request: str = Field(min_length=10, max_length=5000)
    constraints: Optional[UserConstraints] = None
