"""Product name normalization for search keys."""

import re

_CYRILLIC_TO_LATIN: dict[str, str] = {
    "а": "a",
    "б": "b",
    "в": "v",
    "г": "g",
    "д": "d",
    "е": "e",
    "ё": "yo",
    "ж": "zh",
    "з": "z",
    "и": "i",
    "й": "y",
    "к": "k",
    "л": "l",
    "м": "m",
    "н": "n",
    "о": "o",
    "п": "p",
    "р": "r",
    "с": "s",
    "т": "t",
    "у": "u",
    "ф": "f",
    "х": "h",
    "ц": "ts",
    "ч": "ch",
    "ш": "sh",
    "щ": "sch",
    "ъ": "",
    "ы": "y",
    "ь": "",
    "э": "e",
    "ю": "yu",
    "я": "ya",
}

_TRANSLITERATION = str.maketrans(
    {
        **_CYRILLIC_TO_LATIN,
        **{
            letter.upper(): latin.capitalize()
            for letter, latin in _CYRILLIC_TO_LATIN.items()
        },
    }
)

_NON_ALPHANUMERIC = re.compile(r"[^A-Za-z0-9]")


def transliterate(text: str) -> str:
    """Transliterate Cyrillic to Latin and drop everything but ASCII letters/digits.

    >>> transliterate("Молоко 3.2%")
    'Moloko32'
    """
    return _NON_ALPHANUMERIC.sub("", text.translate(_TRANSLITERATION))


def normalize_product_name(name: str) -> str:
    """Return the lowercase ASCII search key for a product name.

    The same key is stored on products and built from search queries, so both
    sides must go through this function.

    >>> normalize_product_name("Овсянка")
    'ovsyanka'
    """
    return transliterate(name).lower()
