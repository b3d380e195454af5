"""
Variant SKU Derivation

Derives a human-readable SKU from the product name and the variant's
selected Size and Color values:

    "Classic T-Shirt", size L, color White  ->  CTSHRT-L-WHT

- name root: initials of every word, then the last word without its first
  letter, vowels and punctuation
- size code: the size itself
- color code: fixed short-code dictionary

Axis values are resolved through the Attribute's declared name, so the
attribute ids assigned by the backend never matter.
"""

import itertools
import re
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import structlog

from catalog_admin.catalog.models import Attribute, AttributeValue, VariantAttribute
from catalog_admin.config import get_settings

logger = structlog.get_logger(__name__)

VOWELS = frozenset("AEIOU")

COLOR_CODES: Dict[str, str] = {
    "BLACK": "BLK",
    "WHITE": "WHT",
    "RED": "RED",
    "BLUE": "BLU",
    "GREEN": "GRN",
    "YELLOW": "YLW",
    "ORANGE": "ORG",
    "PURPLE": "PRP",
    "PINK": "PNK",
    "BROWN": "BRN",
    "GREY": "GRY",
    "GRAY": "GRY",
    "NAVY": "NVY",
    "BEIGE": "BGE",
    "SILVER": "SLV",
    "GOLD": "GLD",
    "MAROON": "MRN",
    "OLIVE": "OLV",
    "CREAM": "CRM",
    "KHAKI": "KHK",
}

SIZE_AXIS = "size"
COLOR_AXIS = "color"

_NAME_CHARS = re.compile(r"[^A-Z\s-]")
_NON_LETTERS = re.compile(r"[^A-Z]")
_NON_ALNUM = re.compile(r"[^A-Z0-9]")


def tokenize_name(name: str) -> List[str]:
    """Uppercase, keep letters/spaces/hyphens, split on whitespace"""
    return _NAME_CHARS.sub("", name.upper()).split()


def name_root(name: str) -> str:
    """
    Build the SKU root for a product name.

    Args:
        name: Product display name

    Returns:
        Initials of every word followed by the consonants of the last word
        after its first letter. Empty when the name has no letters.
    """
    words = [_NON_LETTERS.sub("", word) for word in tokenize_name(name)]
    words = [word for word in words if word]
    if not words:
        return ""

    initials = "".join(word[0] for word in words)
    tail = words[-1][1:]
    tail_consonants = "".join(ch for ch in tail if ch not in VOWELS)
    return initials + tail_consonants


def size_code(value: Optional[str]) -> str:
    """Sizes map to themselves: "M" -> "M", "xl" -> "XL" """
    if not value:
        return ""
    return _NON_ALNUM.sub("", value.upper())


def color_code(value: Optional[str]) -> str:
    """Map a colour name to its short code, e.g. "Black" -> "BLK" """
    if not value:
        return ""
    key = _NON_LETTERS.sub("", value.upper())
    if key in COLOR_CODES:
        return COLOR_CODES[key]
    return key[:3]


def derive_sku(
    product_name: str,
    size: Optional[str] = None,
    color: Optional[str] = None,
    product_id: Optional[int] = None,
) -> str:
    """
    Derive a variant SKU.

    Missing axis values leave their slot empty ("CTSHRT--"). When
    ``product_id`` is given the root is qualified with it.
    """
    root = name_root(product_name)
    if product_id is not None:
        root = f"{root}{product_id}"
    return f"{root}-{size_code(size)}-{color_code(color)}".upper()


# =============================================================================
# ATTRIBUTE SELECTIONS
# =============================================================================

def select_attribute_value(
    selections: Sequence[VariantAttribute],
    attribute_id: int,
    value_id: int,
) -> List[VariantAttribute]:
    """
    Select a value for an attribute, replacing any prior selection for it.

    A variant holds at most one value per attribute; selecting "Blue" after
    "Red" for Color leaves only Blue.
    """
    updated = [s for s in selections if s.attribute_id != attribute_id]
    updated.append(VariantAttribute(attribute_id=attribute_id, value_id=value_id))
    return updated


def clear_attribute(
    selections: Sequence[VariantAttribute],
    attribute_id: int,
) -> List[VariantAttribute]:
    return [s for s in selections if s.attribute_id != attribute_id]


def expand_variants(axes: Mapping[int, Sequence[int]]) -> List[List[VariantAttribute]]:
    """
    Cross-product of the selected values of each attribute.

    Args:
        axes: attribute id -> chosen value ids

    Returns:
        One selection list per purchasable combination, in attribute order.
        Attributes with no chosen values are skipped.
    """
    populated = [(attr_id, list(values)) for attr_id, values in axes.items() if values]
    if not populated:
        return []

    attribute_ids = [attr_id for attr_id, _ in populated]
    combos = itertools.product(*(values for _, values in populated))
    return [
        [VariantAttribute(attribute_id=a, value_id=v) for a, v in zip(attribute_ids, combo)]
        for combo in combos
    ]


class AttributeIndex:
    """
    Lookup of attributes and their values by id.

    Resolves variant selections to named axes (size, color) by the
    attribute's declared name.

    Example:
        index = AttributeIndex(attributes, values)
        size, color = index.axis_values(variant.attributes)
    """

    def __init__(
        self,
        attributes: Iterable[Attribute] = (),
        values: Iterable[AttributeValue] = (),
        size_names: Optional[Sequence[str]] = None,
        color_names: Optional[Sequence[str]] = None,
    ):
        catalog = get_settings().catalog
        self._size_names = {n.lower() for n in (size_names or catalog.size_attribute_names)}
        self._color_names = {n.lower() for n in (color_names or catalog.color_attribute_names)}
        self._attributes: Dict[int, Attribute] = {}
        self._values: Dict[int, AttributeValue] = {}

        for attribute in attributes:
            self._attributes[attribute.id] = attribute
            for value in attribute.values:
                self._values[value.id] = value
        for value in values:
            self._values[value.id] = value

    def axis_of(self, attribute_id: int) -> Optional[str]:
        attribute = self._attributes.get(attribute_id)
        if attribute is None:
            return None
        name = attribute.name.strip().lower()
        if name in self._size_names:
            return SIZE_AXIS
        if name in self._color_names:
            return COLOR_AXIS
        return None

    def axis_values(self, selections: Iterable[VariantAttribute]) -> Tuple[Optional[str], Optional[str]]:
        """Resolve selections to (size value, color value)"""
        resolved: Dict[str, str] = {}
        for selection in selections:
            axis = self.axis_of(selection.attribute_id)
            value = self._values.get(selection.value_id)
            if axis is None or value is None:
                continue
            if value.attribute_id != selection.attribute_id:
                logger.warning(
                    "Selection value belongs to another attribute",
                    attribute_id=selection.attribute_id,
                    value_id=selection.value_id,
                )
                continue
            resolved[axis] = value.value
        return resolved.get(SIZE_AXIS), resolved.get(COLOR_AXIS)

    def sku_for(
        self,
        product_name: str,
        selections: Iterable[VariantAttribute],
        product_id: Optional[int] = None,
    ) -> str:
        size, color = self.axis_values(selections)
        return derive_sku(product_name, size=size, color=color, product_id=product_id)
