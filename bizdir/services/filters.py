"""Filtering helpers for business listings.

Filters run over the records returned by the store so both storage modes
behave the same. All text matching is case-insensitive.
"""

from collections.abc import Iterable, Sequence

from bizdir.models.business import Business

# Fields matched by the free-text search
SEARCH_FIELDS = ("name", "street_name", "zipcode", "city", "email", "phone", "comment")


def _fold(value: str | None) -> str:
    return (value or "").strip().casefold()


def matches_search(business: Business, query: str) -> bool:
    """True if the query occurs in any text field or any tag."""
    needle = _fold(query)
    if not needle:
        return True
    for field in SEARCH_FIELDS:
        if needle in _fold(getattr(business, field)):
            return True
    return any(needle in _fold(tag) for tag in business.tags)


def filter_businesses(
    businesses: Iterable[Business],
    search: str | None = None,
    tags: Sequence[str] | None = None,
    city: str | None = None,
    zipcode: str | None = None,
    active: bool | None = None,
) -> list[Business]:
    """Return the businesses matching every given filter, in input order.

    Args:
        businesses: Records to filter.
        search: Substring looked up in the text fields and tags.
        tags: Tags the business must all carry.
        city: Exact city name.
        zipcode: Zipcode prefix, ignoring spaces ("1234" matches "1234 AB").
        active: Keep only active (True) or inactive (False) records.

    Returns:
        List of matching businesses.
    """
    wanted_tags = {_fold(t) for t in (tags or []) if _fold(t)}
    wanted_city = _fold(city)
    wanted_zip = _fold(zipcode).replace(" ", "")

    result: list[Business] = []
    for business in businesses:
        if active is not None and business.is_active != active:
            continue
        if wanted_city and _fold(business.city) != wanted_city:
            continue
        if wanted_zip and not _fold(business.zipcode).replace(" ", "").startswith(wanted_zip):
            continue
        if wanted_tags and not wanted_tags <= {_fold(t) for t in business.tags}:
            continue
        if search and not matches_search(business, search):
            continue
        result.append(business)
    return result


def distinct_tags(businesses: Iterable[Business]) -> list[str]:
    """All tags in use, sorted case-insensitively."""
    tags = {tag for business in businesses for tag in business.tags}
    return sorted(tags, key=str.casefold)


def distinct_cities(businesses: Iterable[Business]) -> list[str]:
    """All cities in use, sorted case-insensitively."""
    cities = {business.city for business in businesses if business.city}
    return sorted(cities, key=str.casefold)
