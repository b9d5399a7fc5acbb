"""Keyword tagging for extracted menu items.

Tags are driven entirely by ``TAG_RULES``: each rule names the tag, the
keywords that trigger it (lowercase substring match), and the menu categories
it applies to. Rules are independent, so one item can pick up several tags.
"""

from __future__ import annotations

from dataclasses import dataclass

from menu_ingest.models.contracts import MenuCategory


@dataclass(frozen=True)
class TagRule:
    tag: str
    keywords: tuple[str, ...] = ()
    # None = every category
    categories: frozenset[str] | None = None
    always: bool = False

    def applies(self, text: str, category: MenuCategory) -> bool:
        if self.categories is not None and category not in self.categories:
            return False
        return self.always or any(keyword in text for keyword in self.keywords)


_COCKTAILS = frozenset({"signature_cocktails"})
_WINE = frozenset({"wine_list"})

# Varietals are listed so grape-named wines ("Estate Reserve Cabernet") are
# colored even when the menu never prints "red" or "white".
_RED_VARIETALS = (
    "cabernet",
    "merlot",
    "pinot noir",
    "malbec",
    "syrah",
    "shiraz",
    "zinfandel",
    "sangiovese",
    "tempranillo",
    "chianti",
    "bordeaux",
    "rioja",
)
_WHITE_VARIETALS = (
    "chardonnay",
    "sauvignon blanc",
    "pinot grigio",
    "pinot gris",
    "riesling",
    "moscato",
    "viognier",
    "chablis",
)

TAG_RULES: tuple[TagRule, ...] = (
    TagRule("signature", categories=_COCKTAILS, always=True),
    TagRule("premium", ("premium", "top shelf"), categories=_COCKTAILS),
    TagRule("reserve", ("reserve", "vintage"), categories=_WINE),
    TagRule("red", ("red", *_RED_VARIETALS), categories=_WINE),
    TagRule("white", ("white", *_WHITE_VARIETALS), categories=_WINE),
    TagRule("sparkling", ("sparkling", "champagne"), categories=_WINE),
    TagRule("featured", ("featured", "special")),
    TagRule("limited", ("new", "limited")),
)


def classify_tags(
    text: str,
    category: MenuCategory,
    rules: tuple[TagRule, ...] = TAG_RULES,
) -> set[str]:
    """Return the set of tags whose rule matches ``text`` for ``category``."""
    lowered = text.lower()
    return {rule.tag for rule in rules if rule.applies(lowered, category)}
