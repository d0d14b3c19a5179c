"""Icon tags for organization units.

A unit's icon is picked from its id first (functional areas such as
finance or IT), then from its type. Tags are plain names; the tree
renderer maps them to glyphs.
"""

from __future__ import annotations

import re

ICON_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"ekonomi|treasury|redovisning|controlling|juridik"), "scale"),
    (re.compile(r"hr|personal|rekrytering|kompetensutveckling|arbetsratt"), "users"),
    (re.compile(r"(^|-)it($|-)|infrastruktur|applikationer|support"), "server"),
    (re.compile(r"kommunikation|marknad"), "megaphone"),
)

TYPE_ICONS: dict[str, str] = {
    "koncern": "building",
    "division": "briefcase",
    "stab": "briefcase",
}

DEFAULT_ICON = "users"

GLYPHS: dict[str, str] = {
    "building": "🏢",
    "briefcase": "💼",
    "scale": "⚖",
    "users": "👥",
    "server": "🖥",
    "megaphone": "📣",
}


def icon_for(unit_id: str, unit_type: str) -> str:
    """First matching id rule wins, then the type default, then ``users``."""
    for pattern, tag in ICON_RULES:
        if pattern.search(unit_id):
            return tag
    return TYPE_ICONS.get(unit_type, DEFAULT_ICON)


def glyph_for(tag: str) -> str:
    return GLYPHS.get(tag, GLYPHS[DEFAULT_ICON])
