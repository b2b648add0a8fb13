from __future__ import annotations

import re

STOP_WORDS: frozenset[str] = frozenset({
    # articles and prepositions
    "the", "a", "an", "and", "or", "to", "of", "in", "on", "for", "with",
    "at", "by", "from", "as", "is", "are", "was", "were", "be", "been",
    # descriptors that carry no ingredient meaning
    "additional", "topping", "flat", "leaf", "curly", "new", "optional",
    # verbs
    "can", "use", "following",
})

COOKING_MODIFIERS: tuple[str, ...] = (
    "fresh", "freshly", "dried", "frozen", "canned",
    "chopped", "chop", "diced", "dice", "minced", "mince",
    "sliced", "slice", "ground", "grated", "grate", "shredded", "shred",
    "crushed", "crush", "whole", "halved", "halve", "quartered", "quarter",
    "cooked", "cook", "raw", "uncooked", "blanched", "blanch",
    "roasted", "roast", "toasted", "toast", "baked", "bake",
    "grilled", "grill", "fried", "fry", "sauteed", "saute",
    "steamed", "steam", "boiled", "boil", "simmered", "simmer",
    "unsalted", "salted", "salt", "sweetened", "sweet", "unsweetened",
    "organic", "free-range", "grass-fed", "wild-caught",
    "extra virgin", "extra-virgin", "virgin", "light", "dark", "heavy",
    "low-fat", "lowfat", "fat-free", "fatfree", "reduced-fat", "full-fat",
    "boneless", "skinless", "seedless", "pitted",
    "large", "small", "medium", "baby", "young", "mature",
    "ripe", "firm", "soft", "tender", "tough",
    "thick", "thin", "fine", "finely", "coarse", "coarsely",
    "rough", "roughly", "smooth", "smoothly",
)

_SINGLE_WORD_MODIFIERS = frozenset(m for m in COOKING_MODIFIERS if m.isalpha())

# Longest first so "extra virgin" wins over "virgin".
_MODIFIER_RE = re.compile(
    r"\b(?:"
    + "|".join(re.escape(m) for m in sorted(COOKING_MODIFIERS, key=len, reverse=True))
    + r")\b"
)

_PLURAL_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\b(\w+)ies\b"), r"\1y"),
    (re.compile(r"\b(\w+)oes\b"), r"\1o"),
    (re.compile(r"\b(\w+[^\Ws])s\b"), r"\1"),
)

_PUNCTUATION_RE = re.compile(r"[^\w\s]|_")
_NUMBER_RE = re.compile(r"\b\d+\b")


def normalize_string(text: str | None) -> str:
    """Lower-case and trim; ``None`` becomes an empty string."""
    return (text or "").lower().strip()


def _keep_token(token: str) -> bool:
    if len(token) < 2:
        return False
    if token in STOP_WORDS or token in _SINGLE_WORD_MODIFIERS:
        return False
    return not token.isdigit()


def normalize(text: str | None) -> str:
    """
    Canonicalise free text (titles, ingredient names, queries) for matching.

    Steps, in order: lower-case and trim, split on underscores, drop cooking
    modifiers, singularise simple plurals, turn punctuation into spaces, drop
    standalone numbers, then drop stop words, modifiers and tokens shorter
    than two characters.

    The result is a fixed point: ``normalize(normalize(s)) == normalize(s)``.
    """
    # "_" is a word character to the regexes below; split on it up front.
    normalized = normalize_string(text).replace("_", " ")
    if not normalized.strip():
        return ""

    normalized = _MODIFIER_RE.sub(" ", normalized)

    for pattern, replacement in _PLURAL_RULES:
        normalized = pattern.sub(replacement, normalized)

    normalized = _PUNCTUATION_RE.sub(" ", normalized)
    normalized = _NUMBER_RE.sub(" ", normalized)

    return " ".join(token for token in normalized.split() if _keep_token(token))


def tokenize(text: str | None) -> list[str]:
    """Normalise *text* and split it into word-level index terms."""
    return normalize(text).split()
