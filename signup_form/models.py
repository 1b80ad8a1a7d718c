"""
Pydantic models for the signup form.
Normalized output records, tech collection entries and validation settings.
"""

from typing import Any, Dict, Optional, Tuple, Union
from pydantic import BaseModel, ConfigDict, Field, model_validator
import logging

logger = logging.getLogger(__name__)

MEBIBYTE = 1024 * 1024


class ValidationSettings(BaseModel):
    """Fixed constants consumed by the schema engine."""

    model_config = ConfigDict(frozen=True, extra='ignore')

    max_avatar_size_mb: float = Field(default=10, gt=0)
    email_domain: str = Field(default='@gmail.com', min_length=1)
    min_password_length: int = Field(default=8, ge=0)
    min_techs: int = Field(default=2, ge=0)
    knowledge_min: int = 1
    knowledge_max: int = 100
    default_knowledge: int = 0

    @model_validator(mode='after')
    def check_knowledge_bounds(self) -> 'ValidationSettings':
        if self.knowledge_min > self.knowledge_max:
            raise ValueError(
                f"knowledge_min ({self.knowledge_min}) is greater than knowledge_max ({self.knowledge_max})"
            )
        return self

    @property
    def max_avatar_bytes(self) -> int:
        return int(self.max_avatar_size_mb * MEBIBYTE)

    @property
    def max_avatar_label(self) -> str:
        """Size limit as shown to users, e.g. '10Mb'."""
        size = self.max_avatar_size_mb
        return f"{int(size) if float(size).is_integer() else size}Mb"


class AvatarFile(BaseModel):
    """Single uploaded avatar, reduced to the attributes the form reads."""

    model_config = ConfigDict(frozen=True)

    name: str = ""
    size: int
    content_type: Optional[str] = None
    # Original upload object; kept for the output sink, never serialized
    handle: Any = Field(default=None, exclude=True, repr=False)


class TechEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    knowledge: int


class NormalizedRecord(BaseModel):
    """
    Validated and transformed signup record.

    Only built by the schema engine when every rule and refinement passed.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    avatar: AvatarFile
    name: str
    email: str
    password: str
    confirm_password: str = Field(alias='confirmPassword')
    techs: Tuple[TechEntry, ...]

    def to_raw(self) -> Dict[str, Any]:
        """
        Re-serialize as a raw candidate record (all scalars as strings).
        """
        return {
            'avatar': self.avatar.handle if self.avatar.handle is not None else self.avatar,
            'name': self.name,
            'email': self.email,
            'password': self.password,
            'confirmPassword': self.confirm_password,
            'techs': [{'title': t.title, 'knowledge': str(t.knowledge)} for t in self.techs],
        }


class CollectionEntry(BaseModel):
    """One row of the tech collection as seen by the rendering layer."""

    model_config = ConfigDict(frozen=True)

    stable_id: str
    title: str = ""
    knowledge: Optional[Union[int, float, str]] = 0

    def to_raw(self) -> Dict[str, Any]:
        """Projection handed to the schema engine (no stable id)."""
        return {'title': self.title, 'knowledge': self.knowledge}
