"""
TagsNormalizer - order-insensitive comparison of string-list fields.
"""

from typing import Any

from .base_normalizer import BaseNormalizer

TAG_DELIMITER = ","
TAG_ESCAPE = "\\"


def split_tags(text: str) -> list[str]:
    """
    Split a comma-delimited tag string.

    A backslash escapes the next character, so "a\\,b" is the single tag "a,b".
    A trailing lone backslash is kept as is.
    """
    items: list[str] = []
    current: list[str] = []
    chars = iter(text)
    for char in chars:
        if char == TAG_ESCAPE:
            current.append(next(chars, TAG_ESCAPE))
        elif char == TAG_DELIMITER:
            items.append("".join(current))
            current = []
        else:
            current.append(char)
    items.append("".join(current))
    return items


def escape_tag(tag: str) -> str:
    return tag.replace(TAG_ESCAPE, TAG_ESCAPE * 2).replace(TAG_DELIMITER, TAG_ESCAPE + TAG_DELIMITER)


class TagsNormalizer(BaseNormalizer):
    """
    Reduces a tag list to a deduplicated, trimmed, sorted list of non-empty strings.

    Accepts either a list (records) or a comma-delimited string (drafts).
    Blank entries are dropped, so None, [] and [" "] all normalize to [].
    Tags containing a comma are escaped in drafts so seeding round-trips.
    """

    def normalize(self, value: Any) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            items = split_tags(value)
        elif isinstance(value, (list, tuple, set, frozenset)):
            items = value
        else:
            items = [value]

        tags = {str(item).strip() for item in items if item is not None}
        tags.discard("")
        return sorted(tags)

    def to_draft(self, value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, str):
            return value
        if isinstance(value, (list, tuple, set, frozenset)):
            return ", ".join(escape_tag(str(item)) for item in value if item is not None)
        return escape_tag(str(value))

    @property
    def kind(self) -> str:
        return "tags"
