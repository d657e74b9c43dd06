"""Reading people and tags out of ExifTool metadata."""

import re
from typing import Any, Dict, Iterable, List, Set, Tuple

# ExifTool fields holding keyword-style tags
TAG_FIELDS = (
    "Keywords",
    "XPKeywords",
    "Subject",
    "HierarchicalKeywords",
    "TagsList",
    "CatalogSets",
    "SupplementalCategories",
    "XPSubject",
)

# ExifTool fields holding names of detected or tagged people
PEOPLE_FIELDS = (
    "RegionName",
    "PersonInImage",
    "PersonDisplayName",
    "FaceName",
    "PeopleKeywords",
)

# Face regions flattened to a string by some writers
_REGION_NAME = re.compile(r'"Name"\s*:\s*"([^"]+)"')


def strip_group(key: str) -> str:
    """Drop an ExifTool group prefix ("XMP:Subject" -> "Subject")."""
    return key.rsplit(":", 1)[-1]


def split_values(value: Any) -> List[str]:
    """Turn an ExifTool value into a list of trimmed, non-empty strings.

    Strings are split on ";" if present, otherwise on ",". Lists are taken
    element by element without further splitting.

    Examples:
        >>> split_values("Alice; Bob")
        ['Alice', 'Bob']
        >>> split_values(["Alice", " ", "Bob"])
        ['Alice', 'Bob']
    """
    if isinstance(value, str):
        if ";" in value:
            parts = value.split(";")
        elif "," in value:
            parts = value.split(",")
        else:
            parts = [value]
    elif isinstance(value, (list, tuple)):
        parts = [v for v in value if isinstance(v, str)]
    else:
        return []
    return [p.strip() for p in parts if p.strip()]


def _region_names(region_info: Any) -> Iterable[str]:
    """Yield person names found inside a RegionInfo value.

    Handles both the structured form (nested dicts and lists with "Name"
    keys) and a JSON-ish string.
    """
    if isinstance(region_info, str):
        for match in _REGION_NAME.finditer(region_info):
            yield match.group(1).strip()
    elif isinstance(region_info, dict):
        for key, value in region_info.items():
            if key == "Name" and isinstance(value, str):
                yield value.strip()
            else:
                yield from _region_names(value)
    elif isinstance(region_info, list):
        for value in region_info:
            yield from _region_names(value)


def parse_people_and_tags(metadata: Dict[str, Any]) -> Tuple[Set[str], Set[str]]:
    """Extract the people and tags from one file's ExifTool metadata.

    Args:
        metadata: Tag dict as returned by ExifTool (group prefixes allowed).

    Returns:
        Tuple of (people, tags). Both empty if nothing was found.
    """
    people: Set[str] = set()
    tags: Set[str] = set()

    for key, value in metadata.items():
        name = strip_group(key)
        if name in PEOPLE_FIELDS:
            people.update(split_values(value))
        elif name in TAG_FIELDS:
            tags.update(split_values(value))
        elif name == "RegionInfo":
            people.update(n for n in _region_names(value) if n)

    return people, tags
