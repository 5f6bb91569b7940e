"""
Website assembler - turns a wizard profile into a five-section project.
"""
import random
import re
import string
from typing import Dict, List, Optional, Sequence

from logging_config import logger
from services.block_catalog import BlockCatalog, default_catalog
from services.block_models import (
    AssembledProject,
    BlockCatalogEntry,
    BlockType,
    GlobalConfig,
    ProjectBlock,
    WizardProfile,
)


# Typical landing page: Navbar -> Hero -> Features -> Pricing -> Footer
SECTION_ORDER: List[BlockType] = [
    BlockType.NAVBAR,
    BlockType.HERO,
    BlockType.FEATURES,
    BlockType.PRICING,
    BlockType.FOOTER,
]
BLOCKS_PER_PROJECT = len(SECTION_ORDER)

SUBDOMAIN_SUFFIX_LENGTH = 4
_BASE36 = string.digits + string.ascii_lowercase
_NON_ALNUM = re.compile(r"[^a-z0-9]+")
FALLBACK_SLUG = "site"

# Section kinds that tend to convert well per industry
INDUSTRY_RECOMMENDATIONS: Dict[str, List[str]] = {
    "SaaS": ["features", "pricing", "testimonials", "cta"],
    "E-commerce": ["hero", "gallery", "pricing", "testimonials"],
    "Finance": ["hero", "features", "stats", "contact"],
    "Healthcare": ["hero", "team", "contact", "testimonials"],
    "Education": ["hero", "features", "pricing", "faq"],
    "Real Estate": ["gallery", "features", "contact", "cta"],
    "Marketing": ["hero", "stats", "testimonials", "cta"],
    "Entertainment": ["hero", "gallery", "newsletter", "cta"],
    "Tech Startup": ["hero", "features", "pricing", "blog"],
    "Consulting": ["hero", "features", "team", "contact"],
}
DEFAULT_RECOMMENDATIONS = ["hero", "features", "pricing", "footer"]


class WebsiteAssembler:
    """
    Selects catalog blocks for a profile and derives project metadata.

    Selection prefers blocks whose vibe matches the profile, falls back to
    any block of the section type, and pads from the whole catalog when a
    section type has no blocks at all. The random source is injectable so
    tests can seed it.
    """

    def __init__(self, catalog: Optional[BlockCatalog] = None, rng: Optional[random.Random] = None):
        self.catalog = catalog or default_catalog
        self.rng = rng or random.Random()

    def pick_block(self, block_type: BlockType, vibe: str) -> Optional[BlockCatalogEntry]:
        """Random block of a type, preferring vibe matches; None if the type is absent"""
        vibe_matches = self.catalog.matching(block_type, vibe)
        if vibe_matches:
            return self.rng.choice(vibe_matches)

        type_matches = self.catalog.of_type(block_type)
        if type_matches:
            return self.rng.choice(type_matches)

        return None

    def select_blocks(self, vibe: str) -> List[ProjectBlock]:
        chosen: List[BlockCatalogEntry] = []

        for block_type in SECTION_ORDER:
            block = self.pick_block(block_type, vibe)
            if block is None:
                logger.debug("No catalog block for section", section=block_type.value)
                continue
            chosen.append(block)

        # Pad with random distinct blocks when a section type was missing
        catalog_blocks = self.catalog.blocks
        while len(chosen) < BLOCKS_PER_PROJECT:
            candidate = self.rng.choice(catalog_blocks)
            if all(candidate.id != b.id for b in chosen):
                chosen.append(candidate)

        return [
            ProjectBlock(block_id=b.id, name=b.name, type=b.type, order=index)
            for index, b in enumerate(chosen)
        ]

    def assemble_website(self, profile: WizardProfile) -> AssembledProject:
        """Assemble a complete website from the wizard answers"""
        brand_name = profile.brand_name
        industry = profile.industry
        vibe = profile.vibe

        blocks = self.select_blocks(vibe)
        color_scheme = self.catalog.color_scheme(vibe)

        project = AssembledProject(
            name=f"{brand_name} Website",
            description=f"{vibe[:1].upper()}{vibe[1:]} {industry} website for {brand_name}",
            blocks=blocks,
            global_config=GlobalConfig(
                brand_name=brand_name,
                industry=industry,
                vibe=vibe,
                vibe_intensity=profile.vibe_intensity,
                color_scheme=color_scheme,
            ),
            meta_title=f"{brand_name} - {industry} Solutions",
            meta_description=f"Welcome to {brand_name}. Your trusted partner in {industry.lower()}.",
        )

        logger.info(
            "Website assembled",
            brand_name=brand_name,
            vibe=vibe,
            block_ids=[b.block_id for b in blocks]
        )
        return project

    def generate_subdomain(self, brand_name: str) -> str:
        """Slug of the brand name (``site`` when nothing alphanumeric remains) plus a random base36 suffix"""
        cleaned = _NON_ALNUM.sub("-", brand_name.lower()).strip("-") or FALLBACK_SLUG
        suffix = "".join(self.rng.choice(_BASE36) for _ in range(SUBDOMAIN_SUFFIX_LENGTH))
        return f"{cleaned}-{suffix}"


def get_ai_recommendations(profile: WizardProfile) -> List[str]:
    """Recommended section kinds for the profile's industry"""
    return list(INDUSTRY_RECOMMENDATIONS.get(profile.industry, DEFAULT_RECOMMENDATIONS))


def estimate_build_time(blocks: Sequence[ProjectBlock], vibe_intensity: int) -> int:
    """
    Estimated build time in seconds.

    5s base, +2s per block, +1s per 20% vibe intensity.
    """
    return 5 + len(blocks) * 2 + vibe_intensity // 20


_default_assembler = WebsiteAssembler()


def assemble_website(profile: WizardProfile) -> AssembledProject:
    return _default_assembler.assemble_website(profile)


def generate_subdomain(brand_name: str) -> str:
    return _default_assembler.generate_subdomain(brand_name)
