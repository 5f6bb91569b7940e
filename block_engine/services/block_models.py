"""
Value types shared by the website assembler and the block generator.

Every model serializes with camelCase aliases (``blockId``, ``isValid``, ...)
so the HTTP surface matches what the dashboard client sends and expects, while
Python code keeps snake_case attribute names.
"""
import copy
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, model_validator
from pydantic.alias_generators import to_camel


class BlockType(str, Enum):
    """Section kinds a block can implement"""
    HERO = "hero"
    NAVBAR = "navbar"
    FEATURES = "features"
    PRICING = "pricing"
    TESTIMONIALS = "testimonials"
    CTA = "cta"
    FOOTER = "footer"
    FAQ = "faq"
    CONTACT = "contact"
    GALLERY = "gallery"
    TEAM = "team"
    STATS = "stats"
    BLOG = "blog"
    NEWSLETTER = "newsletter"


class Tier(str, Enum):
    """Subscription levels gating premium blocks"""
    FREE = "free"
    PRO = "pro"
    EMPIRE = "empire"


class CamelModel(BaseModel):
    """Base model accepting both snake_case names and camelCase aliases"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# Catalog / Assembler types
# ============================================================================

class BlockCatalogEntry(CamelModel):
    """A seed block available to the assembler"""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    type: BlockType
    vibe: str


class WizardProfile(CamelModel):
    """Brand and vibe answers collected by the creation wizard"""
    brand_name: str = ""
    industry: str = ""
    vibe: str = ""
    vibe_intensity: int = Field(default=50, ge=0, le=100)


class ColorScheme(CamelModel):
    primary: str
    secondary: str
    accent: str


class ProjectBlock(CamelModel):
    """A catalog block placed at a position in an assembled page"""
    block_id: str
    name: str
    type: BlockType
    order: int


class GlobalConfig(CamelModel):
    brand_name: str
    industry: str
    vibe: str
    vibe_intensity: int
    color_scheme: ColorScheme


class AssembledProject(CamelModel):
    """Ready-to-persist project skeleton produced by the assembler"""
    name: str
    description: str
    blocks: List[ProjectBlock]
    global_config: GlobalConfig
    meta_title: str
    meta_description: str


# ============================================================================
# Generator types
# ============================================================================

class ColorsConfig(CamelModel):
    model_config = ConfigDict(extra="allow")

    primary: Any = None
    secondary: Any = None
    background: Any = None
    text: Any = None


class LayoutConfig(CamelModel):
    model_config = ConfigDict(extra="allow")

    variant: Any = None
    columns: Any = None
    alignment: Any = None


class ContentConfig(CamelModel):
    model_config = ConfigDict(extra="allow")

    heading: Any = None
    subheading: Any = None
    button_text: Any = None
    items: Any = None


class AnimationConfig(CamelModel):
    model_config = ConfigDict(extra="allow")

    enabled: Any = None
    type: Any = None
    duration: Any = None


class BlockConfig(CamelModel):
    """
    Configuration payload of a generated block.

    Any JSON object is accepted. The four well-known sections get attribute
    access when they are objects and are kept as-is otherwise; the payload
    exactly as received is what gets stored.
    """
    model_config = ConfigDict(extra="allow")

    colors: Optional[Union[ColorsConfig, Any]] = Field(default=None, union_mode="left_to_right")
    layout: Optional[Union[LayoutConfig, Any]] = Field(default=None, union_mode="left_to_right")
    content: Optional[Union[ContentConfig, Any]] = Field(default=None, union_mode="left_to_right")
    animation: Optional[Union[AnimationConfig, Any]] = Field(default=None, union_mode="left_to_right")

    _raw: Optional[Dict[str, Any]] = PrivateAttr(default=None)

    @model_validator(mode="wrap")
    @classmethod
    def keep_raw_payload(cls, data: Any, handler):
        config = handler(data)
        if isinstance(data, dict):
            config._raw = copy.deepcopy(data)
        return config

    def to_record(self) -> Dict[str, Any]:
        """Config for storage: the keys and values the model returned, unchanged"""
        if self._raw is not None:
            return copy.deepcopy(self._raw)
        return self.model_dump(by_alias=True, exclude_unset=True)


class GeneratorResponse(CamelModel):
    """Model output; untrusted until it passes code validation"""
    code: str = Field(min_length=1)
    config: BlockConfig
    name: str = Field(min_length=1)
    description: Optional[str] = None
    tags: Optional[List[str]] = None


class GenerateBlockParams(CamelModel):
    prompt: str = Field(min_length=1)
    type: BlockType
    user_id: Optional[str] = None
    is_premium: bool = False
    vibe: Optional[str] = None


class GenerateBlockResult(CamelModel):
    """
    Outcome of a generation round trip.

    ``data`` can be present on failure (validation or persistence) for
    diagnostics only; callers must never render or execute it in that case.
    """
    success: bool
    block_id: Optional[str] = None
    data: Optional[GeneratorResponse] = None
    error: Optional[str] = None


class ValidationResult(CamelModel):
    is_valid: bool
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
