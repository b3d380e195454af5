"""
URL slug derivation for categories and products.
"""

import re
from dataclasses import dataclass

_NON_SLUG_CHARS = re.compile(r"[^\w\s-]", re.ASCII)
_SEPARATOR_RUNS = re.compile(r"[\s_-]+")
_EDGE_HYPHENS = re.compile(r"^-+|-+$")


def generate_slug(text: str) -> str:
    """
    Derive a URL-safe slug from a display name.

    "Summer Sale: T-Shirts & Tops" -> "summer-sale-t-shirts-tops"

    Already-slugified input is returned unchanged.
    """
    slug = text.lower().strip()
    slug = _NON_SLUG_CHARS.sub("", slug)
    slug = _SEPARATOR_RUNS.sub("-", slug)
    return _EDGE_HYPHENS.sub("", slug)


@dataclass
class SlugTracker:
    """
    Keeps a slug in step with a name until the user edits the slug by hand.

    The slug follows the name while it is empty or still equal to the slug
    generated from the previous name.
    """
    name: str = ""
    slug: str = ""

    @property
    def is_following(self) -> bool:
        return not self.slug or self.slug == generate_slug(self.name)

    def set_name(self, name: str) -> str:
        if self.is_following:
            self.slug = generate_slug(name)
        self.name = name
        return self.slug

    def set_slug(self, slug: str) -> str:
        self.slug = slug
        return self.slug

    def reset(self) -> str:
        """Drop a manual slug and follow the name again"""
        self.slug = generate_slug(self.name)
        return self.slug
