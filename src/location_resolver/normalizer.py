"""
Location Resolver — Address Normalizer
=======================================
Turns a provider's :class:`~location_resolver.models.ResolvedAddress` into
one canonical :class:`~location_resolver.models.NormalizedLocation`.

Three sources of truth are reconciled, in order of precedence:

1. The provider's structured :class:`~location_resolver.models.Address`.
2. A *fallback dictionary* mined from the provider's raw payload
   (flat keys, ``address`` object or list, ``addresstags``, Google
   ``address_components``).
3. The caller's selected display text (search value only).

Every text field is then passed through
:func:`~location_resolver.text_repair.clean_string` and the country is
expanded with :func:`~location_resolver.countries.expand_country`.
"""

from __future__ import annotations

import json
import logging
from decimal import Decimal
from types import MappingProxyType
from typing import Any, Callable

from location_resolver.countries import expand_country
from location_resolver.models import NormalizedLocation, ResolvedAddress
from location_resolver.text_repair import clean_string, replace_surrogates

logger = logging.getLogger("location_resolver.normalizer")

FALLBACK_SLOTS = (
    "street",
    "number",
    "unit",
    "city",
    "state",
    "postal_code",
    "country",
    "formatted",
    "latitude",
    "longitude",
)

# Provider key spellings → canonical fallback slot.
KEY_MAPPING = MappingProxyType(
    {
        "street": "street",
        "road": "street",
        "pedestrian": "street",
        "footway": "street",
        "residential": "street",
        "highway": "street",
        "route": "street",
        "neighbourhood": "city",
        "number": "number",
        "house_number": "number",
        "housenumber": "number",
        "house": "number",
        "building": "number",
        "unit": "unit",
        "suite": "unit",
        "level": "unit",
        "apartment": "unit",
        "city": "city",
        "town": "city",
        "village": "city",
        "hamlet": "city",
        "municipality": "city",
        "county": "city",
        "suburb": "city",
        "neighborhood": "city",
        "state_district": "state",
        "state": "state",
        "region": "state",
        "province": "state",
        "administrative": "state",
        "postal_code": "postal_code",
        "postcode": "postal_code",
        "zip": "postal_code",
        "country": "country",
        "country_code": "country",
        "display_name": "formatted",
        "name": "formatted",
        "formatted": "formatted",
        "formatted_address": "formatted",
    }
)

# Google address_components types → canonical fallback slot.
GOOGLE_TYPE_MAPPING = MappingProxyType(
    {
        "street_number": "number",
        "route": "street",
        "sublocality": "city",
        "sublocality_level_1": "city",
        "neighborhood": "city",
        "locality": "city",
        "postal_town": "city",
        "administrative_area_level_1": "state",
        "administrative_area_level_2": "city",
        "country": "country",
        "postal_code": "postal_code",
        "subpremise": "unit",
    }
)

# Nominatim lookup ``addresstags`` keys → canonical fallback slot.
ADDRESSTAG_MAPPING = MappingProxyType(
    {
        "street": "street",
        "road": "street",
        "addr_street": "street",
        "housenumber": "number",
        "house_number": "number",
        "addr_housenumber": "number",
        "city": "city",
        "town": "city",
        "village": "city",
        "municipality": "city",
        "state": "state",
        "state_district": "state",
        "region": "state",
        "province": "state",
        "postcode": "postal_code",
        "postalcode": "postal_code",
        "postal_code": "postal_code",
        "zip": "postal_code",
        "country": "country",
    }
)


def build_normalized_location(
    resolved: ResolvedAddress | None, selected_text: str = ""
) -> NormalizedLocation:
    """Build the canonical location for *resolved*.

    Args:
        resolved: The provider's resolve result.  ``None`` yields an empty
                  :class:`NormalizedLocation` rather than an error.
        selected_text: Display text the user picked from the suggestions.

    Returns:
        A fully repaired :class:`NormalizedLocation`.
    """
    if resolved is None:
        return NormalizedLocation()

    fallback = build_fallback_dictionary(resolved.raw)
    address = resolved.address

    selected = clean_string(selected_text) or clean_string(resolved.formatted)

    if resolved.coordinates.is_known:
        latitude = format_coordinate(resolved.coordinates.latitude)
        longitude = format_coordinate(resolved.coordinates.longitude)
    else:
        latitude = fallback["latitude"]
        longitude = fallback["longitude"]

    return NormalizedLocation(
        provider=replace_surrogates(resolved.provider),
        provider_ref=replace_surrogates(resolved.provider_ref),
        provider_url=replace_surrogates(resolved.provider_url),
        search_value=clean_string(
            first_non_empty_string(resolved.formatted, fallback["formatted"], selected_text)
        ),
        selected_text=selected,
        street=clean_string(first_non_empty_string(address.street, fallback["street"])),
        number=clean_string(first_non_empty_string(address.number, fallback["number"])),
        unit=clean_string(first_non_empty_string(address.unit, fallback["unit"])),
        city=clean_string(first_non_empty_string(address.city, fallback["city"])),
        state=clean_string(first_non_empty_string(address.state, fallback["state"])),
        postal_code=clean_string(
            first_non_empty_string(address.postal_code, fallback["postal_code"])
        ),
        country=expand_country(
            clean_string(first_non_empty_string(address.country, fallback["country"]))
        ),
        latitude=replace_surrogates(latitude),
        longitude=replace_surrogates(longitude),
        raw_json=_encode_raw(resolved.raw),
    )


def build_fallback_dictionary(raw: dict[str, Any] | None) -> dict[str, str]:
    """Mine *raw* for the best available value of each canonical slot.

    The walk visits, in order: top-level keys, an ``address`` object, an
    ``address`` list of ``{type|class, localname|name|display_name}``
    entries, Google ``address_components``, explicit formatted/coordinate
    keys, then Nominatim ``addresstags``.  A later candidate only replaces
    an earlier value under :func:`prefer_fallback_override`.

    Returns:
        A dict with every key of :data:`FALLBACK_SLOTS`; missing slots are
        ``""``.
    """
    fallback = {slot: "" for slot in FALLBACK_SLOTS}
    if not raw:
        return fallback

    def register(target: str, value: str) -> None:
        cleaned = clean_string(value)
        if not target or not cleaned:
            return
        existing = fallback[target]
        if not existing or prefer_fallback_override(existing, cleaned):
            fallback[target] = cleaned

    _register_mapped(raw, register)

    address = raw.get("address")
    if isinstance(address, dict):
        _register_mapped(address, register)
    elif isinstance(address, list):
        for entry in address:
            if not isinstance(entry, dict):
                continue
            key = (value_to_string(entry.get("type")) or value_to_string(entry.get("class"))).lower()
            value = (
                value_to_string(entry.get("localname"))
                or value_to_string(entry.get("name"))
                or value_to_string(entry.get("display_name"))
            )
            if key and value and key in KEY_MAPPING:
                register(KEY_MAPPING[key], value)

    components = raw.get("address_components")
    if isinstance(components, list):
        for comp in components:
            if not isinstance(comp, dict) or not isinstance(comp.get("types"), list):
                continue
            long_name = value_to_string(comp.get("long_name"))
            for component_type in comp["types"]:
                mapped = GOOGLE_TYPE_MAPPING.get(value_to_string(component_type).lower())
                if mapped:
                    register(mapped, long_name)

    for slot, keys in (
        ("formatted", ("display_name", "name")),
        ("latitude", ("lat", "latitude")),
        ("longitude", ("lon", "lng", "longitude")),
    ):
        for key in keys:
            if fallback[slot]:
                break
            register(slot, value_to_string(raw.get(key)))

    tags = raw.get("addresstags")
    if isinstance(tags, dict):
        for key, value in tags.items():
            text = value_to_string(value)
            if not text:
                continue
            lowered = str(key).lower()
            if lowered in ("countrycode", "country_code"):
                register("country", text if len(text) > 3 else text.upper())
            elif lowered in ADDRESSTAG_MAPPING:
                register(ADDRESSTAG_MAPPING[lowered], text)

    return fallback


def prefer_fallback_override(existing: str, candidate: str) -> bool:
    """Decide whether *candidate* should replace an already-registered value.

    A full name beats a short code (``"MX"`` → ``"Mexico"``), and a
    meaningfully longer, multi-word value beats a shorter one.
    """
    if not existing:
        return True
    if is_likely_code(existing) and not is_likely_code(candidate):
        return True
    return len(candidate) > len(existing) + 2 and " " in candidate


def is_likely_code(value: str) -> bool:
    """``True`` for one to three upper-case ASCII letters (``"MX"``, ``"USA"``)."""
    return 0 < len(value) <= 3 and all("A" <= ch <= "Z" for ch in value)


def first_non_empty_string(*values: str | None) -> str:
    """Return the first non-blank value, stripped; ``""`` if there is none."""
    for value in values:
        if value and value.strip():
            return value.strip()
    return ""


def value_to_string(value: Any) -> str:
    """Render a raw JSON scalar as text; containers and booleans become ``""``."""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, bool):
        return ""
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return format_coordinate(value)
    return ""


def format_coordinate(value: float) -> str:
    """Shortest decimal rendering of *value*, never in exponent notation.

    Example::

        >>> format_coordinate(-122.0)
        '-122'
        >>> format_coordinate(37.4224764)
        '37.4224764'
    """
    return format(Decimal(repr(float(value))).normalize(), "f")


def _register_mapped(source: dict[str, Any], register: Callable[[str, str], None]) -> None:
    for key, value in source.items():
        text = value_to_string(value)
        if not text:
            continue
        mapped = KEY_MAPPING.get(str(key).lower())
        if mapped:
            register(mapped, text)


def _encode_raw(raw: dict[str, Any] | None) -> str:
    # Serialisation failures leave raw_json empty; the location is still usable.
    if not raw:
        return ""
    try:
        text = json.dumps(raw, ensure_ascii=False, separators=(",", ":"))
    except (TypeError, ValueError) as exc:
        logger.debug("raw payload not serialisable: %s", exc)
        return ""
    return replace_surrogates(text)
