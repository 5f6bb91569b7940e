"""
Prompts for the block generator.
"""
from typing import Dict

from services.block_models import BlockType, GenerateBlockParams


BLOCK_SYSTEM_PROMPT = """You are an expert React and Tailwind CSS developer specializing in creating modern, production-ready UI components.

Your task is to generate ONLY valid React components using:
- TypeScript with proper typing
- Tailwind CSS for all styling (no inline styles or CSS modules)
- Lucide React for icons (import from 'lucide-react')
- Framer Motion for animations when appropriate (import from 'framer-motion')
- Modern React patterns (hooks, functional components)
- Responsive design (mobile-first)
- Accessibility best practices (ARIA labels, semantic HTML)

CRITICAL RULES:
1. Return ONLY a valid JSON object with this exact structure:
{
  "code": "the complete React component code as a string",
  "config": {
    "colors": { "primary": "#hex", "secondary": "#hex", "background": "#hex" },
    "layout": { "variant": "string", "columns": number },
    "content": { "heading": "string", "subheading": "string" },
    "animation": { "enabled": boolean, "type": "string" }
  },
  "name": "ComponentName",
  "description": "Brief description of the component",
  "tags": ["tag1", "tag2", "tag3"]
}

2. The component MUST:
   - Be a default export
   - Be fully self-contained (no external data fetching)
   - Use 'use client' directive if using hooks or interactivity
   - Have TypeScript interfaces for all props
   - Be production-ready and visually impressive

3. NEVER include:
   - window.location redirects
   - eval() or Function() constructors
   - dangerouslySetInnerHTML
   - External script tags
   - Inline event handlers as strings
   - References to process.env or server-side code

4. Style Guidelines:
   - Use dark mode by default (dark backgrounds)
   - Implement glassmorphism effects (backdrop-blur, transparency)
   - Add subtle animations and transitions
   - Ensure high contrast for readability
   - Use gradient accents sparingly

5. DO NOT include any markdown code blocks, explanations, or text outside the JSON object."""


BLOCK_TYPE_INSTRUCTIONS: Dict[BlockType, str] = {
    BlockType.HERO: "Create a hero section with a compelling headline, subheading, CTA button, and optional visual background effects.",
    BlockType.PRICING: "Create a pricing section with 3 tiers (cards) including features, pricing, and CTA buttons.",
    BlockType.FOOTER: "Create a footer with navigation links, social icons, copyright, and optional newsletter signup.",
    BlockType.NAVBAR: "Create a navigation bar with logo, menu items, mobile hamburger menu, and optional CTA button.",
    BlockType.FEATURES: "Create a features section showcasing 4-6 features with icons, headings, and descriptions in a grid layout.",
    BlockType.TESTIMONIALS: "Create a testimonials section with customer reviews, avatars, names, and ratings in cards.",
    BlockType.CTA: "Create a call-to-action section with bold headline, description, and prominent action button(s).",
    BlockType.FAQ: "Create an FAQ section with expandable/collapsible accordion items for questions and answers.",
    BlockType.CONTACT: "Create a contact form with input fields (name, email, message), validation states, and submit button.",
    BlockType.GALLERY: "Create an image gallery with grid layout, hover effects, and optional lightbox functionality.",
    BlockType.TEAM: "Create a team section showcasing team members with photos, names, roles, and social links.",
    BlockType.STATS: "Create a statistics section displaying key metrics with large numbers, labels, and animated counters.",
    BlockType.BLOG: "Create a blog post grid/list with featured images, titles, excerpts, dates, and read more links.",
    BlockType.NEWSLETTER: "Create a newsletter signup section with email input, compelling copy, and subscribe button.",
}


def build_block_prompt(params: GenerateBlockParams) -> str:
    """User prompt for one block: type template, user request, optional vibe"""
    type_instructions = BLOCK_TYPE_INSTRUCTIONS[params.type]

    vibe_instruction = ""
    if params.vibe:
        vibe_instruction = f"\nAesthetic Vibe: {params.vibe}. Incorporate this aesthetic into the design system."

    return f"""{type_instructions}

User Request: {params.prompt}{vibe_instruction}

Remember: Return ONLY the JSON object with code, config, name, description, and tags. No markdown, no explanations."""
