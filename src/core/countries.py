"""Country life-expectancy table — pure lookup data.

Baseline (male, female) life expectancy in years per country. Keys are the
Japanese country names the app has always stored in profiles; English
aliases resolve to the same rows.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.data.models import Gender

DEFAULT_EXPECTANCY: tuple[float, float] = (80.0, 85.0)

_LIFE_EXPECTANCY: dict[str, tuple[float, float]] = {
    "日本": (81.6, 87.7),
    "アメリカ": (76.1, 81.1),
    "イギリス": (79.4, 83.1),
    "ドイツ": (78.9, 83.6),
    "フランス": (79.7, 85.6),
    "カナダ": (80.9, 84.8),
    "オーストラリア": (81.2, 85.4),
    "韓国": (80.3, 86.3),
    "中国": (75.0, 78.0),
    "インド": (69.4, 72.0),
}

# Lowercased English name → canonical key
_ALIASES: dict[str, str] = {
    "japan": "日本",
    "usa": "アメリカ",
    "us": "アメリカ",
    "united states": "アメリカ",
    "america": "アメリカ",
    "uk": "イギリス",
    "united kingdom": "イギリス",
    "britain": "イギリス",
    "germany": "ドイツ",
    "france": "フランス",
    "canada": "カナダ",
    "australia": "オーストラリア",
    "korea": "韓国",
    "south korea": "韓国",
    "china": "中国",
    "india": "インド",
}


def canonical_country(country: str) -> str | None:
    """Return the table key for a country name or alias, or None if unknown."""
    name = country.strip()
    if name in _LIFE_EXPECTANCY:
        return name
    return _ALIASES.get(name.lower())


def lookup(country: str) -> tuple[float, float]:
    """Return (male_years, female_years); the default pair for unknown countries."""
    key = canonical_country(country)
    if key is None:
        return DEFAULT_EXPECTANCY
    return _LIFE_EXPECTANCY[key]


def expectancy_for(gender: Gender | str, country: str) -> float:
    """Baseline life expectancy for a gender; "other" is the male/female mean."""
    male, female = lookup(country)
    value = getattr(gender, "value", gender)
    if value == "male":
        return male
    if value == "female":
        return female
    return (male + female) / 2


def list_countries() -> list[str]:
    """Canonical country names in table order."""
    return list(_LIFE_EXPECTANCY)
