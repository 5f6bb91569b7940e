"""
Static block catalog and vibe palettes used by the website assembler.
"""
from typing import Dict, List, Optional, Sequence

from services.block_models import BlockCatalogEntry, BlockType, ColorScheme


DEFAULT_VIBE = "minimal"

# A page has five sections and never repeats a block
MIN_DISTINCT_BLOCKS = 5

# Seed blocks shipped with every deployment
SEED_BLOCKS: List[BlockCatalogEntry] = [
    # Hero blocks
    BlockCatalogEntry(id="1", name="Minimal Hero", type=BlockType.HERO, vibe="minimal"),
    BlockCatalogEntry(id="2", name="Bold Hero", type=BlockType.HERO, vibe="bold"),
    BlockCatalogEntry(id="3", name="Elegant Hero", type=BlockType.HERO, vibe="elegant"),
    BlockCatalogEntry(id="4", name="Cyberpunk Hero", type=BlockType.HERO, vibe="cyberpunk"),

    # Navbar blocks
    BlockCatalogEntry(id="5", name="Clean Navbar", type=BlockType.NAVBAR, vibe="minimal"),
    BlockCatalogEntry(id="6", name="Modern Navbar", type=BlockType.NAVBAR, vibe="elegant"),
    BlockCatalogEntry(id="7", name="Neon Navbar", type=BlockType.NAVBAR, vibe="cyberpunk"),

    # Features blocks
    BlockCatalogEntry(id="8", name="Grid Features", type=BlockType.FEATURES, vibe="minimal"),
    BlockCatalogEntry(id="9", name="Animated Features", type=BlockType.FEATURES, vibe="playful"),
    BlockCatalogEntry(id="10", name="Professional Features", type=BlockType.FEATURES, vibe="professional"),
    BlockCatalogEntry(id="11", name="Neon Features", type=BlockType.FEATURES, vibe="cyberpunk"),

    # Pricing blocks
    BlockCatalogEntry(id="12", name="Simple Pricing", type=BlockType.PRICING, vibe="minimal"),
    BlockCatalogEntry(id="13", name="Bold Pricing", type=BlockType.PRICING, vibe="bold"),
    BlockCatalogEntry(id="14", name="Elegant Pricing", type=BlockType.PRICING, vibe="elegant"),

    # CTA blocks
    BlockCatalogEntry(id="15", name="Minimal CTA", type=BlockType.CTA, vibe="minimal"),
    BlockCatalogEntry(id="16", name="Bold CTA", type=BlockType.CTA, vibe="bold"),
    BlockCatalogEntry(id="17", name="Playful CTA", type=BlockType.CTA, vibe="playful"),

    # Footer blocks
    BlockCatalogEntry(id="18", name="Simple Footer", type=BlockType.FOOTER, vibe="minimal"),
    BlockCatalogEntry(id="19", name="Professional Footer", type=BlockType.FOOTER, vibe="professional"),
    BlockCatalogEntry(id="20", name="Cyberpunk Footer", type=BlockType.FOOTER, vibe="cyberpunk"),

    # Testimonials
    BlockCatalogEntry(id="21", name="Card Testimonials", type=BlockType.TESTIMONIALS, vibe="minimal"),
    BlockCatalogEntry(id="22", name="Elegant Testimonials", type=BlockType.TESTIMONIALS, vibe="elegant"),

    # Contact
    BlockCatalogEntry(id="23", name="Simple Contact", type=BlockType.CONTACT, vibe="minimal"),
    BlockCatalogEntry(id="24", name="Modern Contact", type=BlockType.CONTACT, vibe="professional"),
]

# Color schemes based on vibe
VIBE_COLOR_SCHEMES: Dict[str, ColorScheme] = {
    "minimal": ColorScheme(primary="#000000", secondary="#FFFFFF", accent="#6B7280"),
    "bold": ColorScheme(primary="#DC2626", secondary="#EA580C", accent="#F59E0B"),
    "elegant": ColorScheme(primary="#8B5CF6", secondary="#3B82F6", accent="#EC4899"),
    "playful": ColorScheme(primary="#EC4899", secondary="#F59E0B", accent="#10B981"),
    "professional": ColorScheme(primary="#1E40AF", secondary="#4338CA", accent="#6366F1"),
    "cyberpunk": ColorScheme(primary="#06B6D4", secondary="#A855F7", accent="#F0ABFC"),
}


class BlockCatalog:
    """Read-only view over a fixed list of blocks and the vibe palette table"""

    def __init__(
        self,
        blocks: Optional[Sequence[BlockCatalogEntry]] = None,
        color_schemes: Optional[Dict[str, ColorScheme]] = None
    ):
        self._blocks = tuple(SEED_BLOCKS if blocks is None else blocks)
        distinct = len({b.id for b in self._blocks})
        if distinct < MIN_DISTINCT_BLOCKS:
            raise ValueError(
                f"Block catalog needs at least {MIN_DISTINCT_BLOCKS} distinct blocks, got {distinct}"
            )
        self._color_schemes = dict(VIBE_COLOR_SCHEMES if color_schemes is None else color_schemes)

    @property
    def blocks(self) -> Sequence[BlockCatalogEntry]:
        return self._blocks

    def of_type(self, block_type: BlockType) -> List[BlockCatalogEntry]:
        return [b for b in self._blocks if b.type == block_type]

    def matching(self, block_type: BlockType, vibe: str) -> List[BlockCatalogEntry]:
        """Blocks of ``block_type`` tagged with ``vibe``"""
        return [b for b in self._blocks if b.type == block_type and b.vibe == vibe]

    def color_scheme(self, vibe: str) -> ColorScheme:
        """Palette for a vibe; unknown vibes get the minimal palette"""
        return self._color_schemes.get(vibe) or self._color_schemes[DEFAULT_VIBE]


default_catalog = BlockCatalog()
