"""
Random parameters for the autonomous block factory.
"""
import random
from dataclasses import dataclass
from typing import Dict, List, Optional

from services.block_models import BlockType


# All available block categories
BLOCK_CATEGORIES: List[BlockType] = [
    BlockType.HERO,
    BlockType.NAVBAR,
    BlockType.FEATURES,
    BlockType.PRICING,
    BlockType.TESTIMONIALS,
    BlockType.CTA,
    BlockType.FOOTER,
    BlockType.FAQ,
    BlockType.CONTACT,
    BlockType.GALLERY,
    BlockType.TEAM,
    BlockType.STATS,
    BlockType.BLOG,
    BlockType.NEWSLETTER,
]

# Aesthetic vibes used to steer generation
VIBES: List[str] = [
    "minimal",
    "glassmorphism",
    "dark",
    "luxury",
    "cyberpunk",
    "neon",
    "neomorphism",
    "brutalist",
    "gradient",
    "retro",
    "modern",
    "playful",
    "professional",
    "elegant",
    "bold",
]

BLOCK_PROMPTS: Dict[BlockType, List[str]] = {
    BlockType.HERO: [
        "Create a hero section for a SaaS product with a compelling headline",
        "Design a hero banner for an e-commerce store",
        "Build a hero section for a tech startup with futuristic vibes",
        "Create an impactful hero for a creative agency",
        "Design a hero section for a fintech app with trust signals",
    ],
    BlockType.NAVBAR: [
        "Create a navigation bar for a modern web app",
        "Design a navbar for an e-commerce platform",
        "Build a header with mega menu for a content site",
        "Create a sticky navbar for a portfolio website",
        "Design a transparent navbar that becomes solid on scroll",
    ],
    BlockType.FEATURES: [
        "Create a features section highlighting three key benefits",
        "Design a feature showcase with icon cards",
        "Build a feature comparison grid",
        "Create an interactive features showcase",
        "Design a features section with animated icons",
    ],
    BlockType.PRICING: [
        "Create a pricing table with three tiers",
        "Design a pricing section with toggle for monthly/yearly",
        "Build a pricing comparison with highlighted popular plan",
        "Create a simple pricing card layout",
        "Design an enterprise pricing showcase",
    ],
    BlockType.TESTIMONIALS: [
        "Create a testimonials section with customer reviews",
        "Design a testimonial carousel with avatars",
        "Build a video testimonials grid",
        "Create a testimonials wall with ratings",
        "Design a case study testimonials section",
    ],
    BlockType.CTA: [
        "Create a call-to-action section for sign-ups",
        "Design a conversion-focused CTA banner",
        "Build a CTA section with urgency messaging",
        "Create a newsletter signup CTA",
        "Design a free trial CTA section",
    ],
    BlockType.FOOTER: [
        "Create a comprehensive footer with links and social icons",
        "Design a minimal footer for a landing page",
        "Build a footer with newsletter subscription",
        "Create a footer with multiple columns",
        "Design a footer with site map and contact info",
    ],
    BlockType.FAQ: [
        "Create an accordion FAQ section",
        "Design a searchable FAQ page",
        "Build a FAQ grid with categories",
        "Create an animated FAQ accordion",
        "Design a FAQ section with icons",
    ],
    BlockType.CONTACT: [
        "Create a contact form with validation",
        "Design a contact section with map integration",
        "Build a contact card with multiple methods",
        "Create a multi-step contact form",
        "Design a contact section with office info",
    ],
    BlockType.GALLERY: [
        "Create a masonry image gallery",
        "Design a filterable portfolio gallery",
        "Build a lightbox image gallery",
        "Create an animated grid gallery",
        "Design a gallery with hover effects",
    ],
    BlockType.TEAM: [
        "Create a team members showcase grid",
        "Design a team section with bio cards",
        "Build a team page with social links",
        "Create an animated team member grid",
        "Design a team showcase with roles",
    ],
    BlockType.STATS: [
        "Create a statistics counter section",
        "Design a data visualization dashboard",
        "Build an animated stats showcase",
        "Create a metrics overview panel",
        "Design a KPI dashboard section",
    ],
    BlockType.BLOG: [
        "Create a blog post card grid",
        "Design a featured blog post section",
        "Build a blog listing with filters",
        "Create a blog showcase with categories",
        "Design a latest articles section",
    ],
    BlockType.NEWSLETTER: [
        "Create a newsletter signup form",
        "Design a popup newsletter subscription",
        "Build an inline newsletter CTA",
        "Create a newsletter section with benefits",
        "Design a minimal email capture form",
    ],
}

# High-demand categories are generated more often
BLOCK_WEIGHTS: Dict[BlockType, int] = {
    BlockType.HERO: 10,
    BlockType.NAVBAR: 8,
    BlockType.FEATURES: 10,
    BlockType.PRICING: 9,
    BlockType.TESTIMONIALS: 7,
    BlockType.CTA: 8,
    BlockType.FOOTER: 6,
    BlockType.FAQ: 5,
    BlockType.CONTACT: 5,
    BlockType.GALLERY: 4,
    BlockType.TEAM: 4,
    BlockType.STATS: 6,
    BlockType.BLOG: 5,
    BlockType.NEWSLETTER: 6,
}


@dataclass(frozen=True)
class FactoryParams:
    category: BlockType
    vibe: str
    prompt: str


@dataclass(frozen=True)
class GenerationStats:
    total_combinations: float
    categories_count: int
    vibes_count: int
    average_prompts_per_category: float


class FactoryRandomizer:
    """Random category/vibe/prompt picks with an injectable random source"""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def random_vibe(self) -> str:
        return self.rng.choice(VIBES)

    def random_prompt(self, block_type: BlockType) -> str:
        return self.rng.choice(BLOCK_PROMPTS[block_type])

    def random_block_params(self) -> FactoryParams:
        """Weighted category with a vibe and a prompt written for that category"""
        category = self.weighted_random_category()
        return FactoryParams(
            category=category,
            vibe=self.random_vibe(),
            prompt=self.random_prompt(category)
        )

    def weighted_random_category(self) -> BlockType:
        """Category drawn proportionally to BLOCK_WEIGHTS"""
        total_weight = sum(BLOCK_WEIGHTS.values())
        remaining = self.rng.random() * total_weight

        for category, weight in BLOCK_WEIGHTS.items():
            remaining -= weight
            if remaining <= 0:
                return category

        return BlockType.HERO


def generation_stats() -> GenerationStats:
    """Size of the factory's prompt space"""
    categories_count = len(BLOCK_CATEGORIES)
    vibes_count = len(VIBES)
    total_prompts = sum(len(prompts) for prompts in BLOCK_PROMPTS.values())
    average_prompts = total_prompts / categories_count

    return GenerationStats(
        total_combinations=categories_count * vibes_count * average_prompts,
        categories_count=categories_count,
        vibes_count=vibes_count,
        average_prompts_per_category=average_prompts
    )
