"""
Scene catalog and the UGC generation prompt.
"""
from typing import Dict, List, Optional

# Scene categories offered to the user; each scene string is embedded verbatim in the prompt
SCENE_CATEGORIES = [
    {
        "id": "lifestyle",
        "label": "Lifestyle & Daily Routine",
        "icon": "🏠",
        "scenes": [
            "Home",
            "Living Room",
            "Bedroom",
            "Kitchen",
            "Balcony",
            "Office desk setup / workspace",
            "Co-working space",
            "Study table / college library",
            "Gym or fitness studio",
            "Morning routine bathroom setup",
            "Kitchen countertop",
        ],
    },
    {
        "id": "outdoor",
        "label": "Outdoor & Public Spaces",
        "icon": "🏙️",
        "scenes": [
            "Café / Coffee shop",
            "Street style shots",
            "Shopping mall / storefronts",
            "Park or garden",
            "Beach / lake side",
            "Rooftop terrace",
            "Outdoor market",
            "Metro station aesthetics",
        ],
    },
    {
        "id": "creative",
        "label": "Creative & Aesthetic Spots",
        "icon": "🎨",
        "scenes": [
            "Neon light rooms",
            "Art gallery or museum",
            "Vintage/retro-themed cafés",
            "Bookstore or reading corner",
            "Graffiti walls",
            "Minimal clean white wall",
            "Wooden textured background",
            "Aesthetic curtains with natural light",
        ],
    },
    {
        "id": "social",
        "label": "Social & Event Spaces",
        "icon": "🎉",
        "scenes": [
            "Night club environment",
            "College campus",
            "Event stalls",
            "Music concert ambience",
            "Friends’ hangout spaces",
            "Restaurant table setup",
        ],
    },
    {
        "id": "nature",
        "label": "Nature & Travel Themes",
        "icon": "🌿",
        "scenes": [
            "Forest trail",
            "Hill station viewpoint",
            "Waterfall spot",
            "Bicycle ride background",
            "Car interior shots",
            "Travel suitcase / airport lounge",
        ],
    },
    {
        "id": "product",
        "label": "Product-Focused",
        "icon": "📸",
        "scenes": [
            "Flat-lay studio setup",
            "Solid color backdrop",
            "Minimal aesthetic shelf styling",
            "Marble/stone textured surface",
            "Wooden tabletop",
            "Soft fabric textures",
            "LED-lit product table",
        ],
    },
]

OUTPUT_ASPECT_RATIO = "1:1"

UGC_PROMPT_TEMPLATE = """Create a realistic, high-quality UGC (User Generated Content) Instagram photo.
Scene Atmosphere: "{scene}".

Instructions:
1. Blend the person from the provided person-image and the product from the product-image.
2. Seamlessly place them into the specified scene.
3. The person should be interacting with the product naturally (holding it, using it, or looking at it).
4. Use soft, natural lighting, a shallow depth of field and an authentic "smartphone photo" aesthetic.
5. The final output MUST be a single high-quality {aspect_ratio} square image.

Produce ONLY the generated image."""


def build_ugc_prompt(scene: str) -> str:
    """Instruction text sent ahead of the person and product images."""
    return UGC_PROMPT_TEMPLATE.format(scene=scene, aspect_ratio=OUTPUT_ASPECT_RATIO)


def all_scenes() -> List[str]:
    return [scene for category in SCENE_CATEGORIES for scene in category["scenes"]]


def find_category(scene: str) -> Optional[Dict]:
    for category in SCENE_CATEGORIES:
        if scene in category["scenes"]:
            return category
    return None


def is_known_scene(scene: Optional[str]) -> bool:
    return bool(scene) and find_category(scene) is not None
