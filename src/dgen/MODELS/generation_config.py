"""
Models for generation settings: which templates to render and where.
"""
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field


class FilterMode(str, Enum):
    """
    Which containers a template is rendered against.
    """
    ALL = "all"
    PUBLISHED = "published"
    EXPOSED = "exposed"


class GenerationConfig(BaseModel):
    """
    A single template and the file it is rendered into.
    """
    template: str
    dest: Optional[str] = None
    only_published: bool = False
    only_exposed: bool = False

    @property
    def filter_mode(self) -> FilterMode:
        if self.only_published:
            return FilterMode.PUBLISHED
        if self.only_exposed:
            return FilterMode.EXPOSED
        return FilterMode.ALL


class GeneratorSettings(BaseModel):
    """
    Everything needed for one generation run.
    Equivalent to a parsed dgen.yml file.
    """
    endpoint: Optional[str] = None
    configs: List[GenerationConfig] = Field(min_length=1)
