from __future__ import annotations

import re
from string import Template
from typing import Any, Optional
from urllib.parse import urlencode

from ..core.constants import DEFAULT_BACKGROUND_COLOR, DEFAULT_PRIMARY_COLOR, DEFAULT_SECONDARY_COLOR

_HEX_RE = re.compile(r"^[0-9A-Fa-f]{6}$")

_ICON_TEMPLATE = Template(
    """<?xml version="1.0" encoding="UTF-8"?>
<svg width="581" height="580" viewBox="0 0 581 580" fill="none" xmlns="http://www.w3.org/2000/svg">
<rect x="0.5" width="580" height="580" fill="black"/>
<rect x="0.5" width="580" height="580" fill="url(#bg)"/>
<mask id="ring" style="mask-type:alpha" maskUnits="userSpaceOnUse" x="0" y="0" width="580" height="580">
<path d="M580 0V580H0V0H580ZM245.5 64.5C120.96 64.5 20 165.46 20 290C20 414.54 120.96 515.5 245.5 515.5C370.04 515.5 471 414.54 471 290C471 165.46 370.04 64.5 245.5 64.5ZM245.5 169.5C312.05 169.5 366 223.45 366 290C366 356.55 312.05 410.5 245.5 410.5C178.95 410.5 125 356.55 125 290C125 223.45 178.95 169.5 245.5 169.5Z" fill="white"/>
</mask>
<g mask="url(#ring)">
<path d="M508.5 462.5H436.053C422.59 462.5 409.696 457.071 400.288 447.441L259.735 303.571C250.609 294.23 245.5 281.689 245.5 268.63V187" stroke="white" stroke-opacity="0.85" stroke-width="35" stroke-linecap="round"/>
</g>
<circle cx="245.5" cy="290" r="173" stroke="white" stroke-opacity="0.85" stroke-width="35"/>
<defs>
<linearGradient id="bg" x1="203" y1="186" x2="580.5" y2="580" gradientUnits="userSpaceOnUse">
<stop stop-color="#$primary"/>
<stop offset="1" stop-color="#$secondary" stop-opacity="0.5"/>
</linearGradient>
</defs>
</svg>
"""
)

ICON_SIZES = ("512x512", "192x192", "144x144")


def sanitize_color(value: Optional[str], default: str) -> str:
    """Return a 6-digit hex color without `#`, or the default."""
    color = (value or "").strip().lstrip("#")
    return color if _HEX_RE.match(color) else default


class AssetService:
    """Themed home-screen icon and web-app manifest."""

    def render_icon(self, *, primary: Optional[str] = None, secondary: Optional[str] = None) -> str:
        return _ICON_TEMPLATE.substitute(
            primary=sanitize_color(primary, DEFAULT_PRIMARY_COLOR),
            secondary=sanitize_color(secondary, DEFAULT_SECONDARY_COLOR),
        )

    def build_manifest(
        self,
        *,
        icon_url: str,
        start_url: str = "/",
        primary: Optional[str] = None,
        secondary: Optional[str] = None,
        background: Optional[str] = None,
    ) -> dict[str, Any]:
        query = urlencode(
            {
                "primary": sanitize_color(primary, DEFAULT_PRIMARY_COLOR),
                "secondary": sanitize_color(secondary, DEFAULT_SECONDARY_COLOR),
            }
        )
        background_color = "#" + sanitize_color(background, DEFAULT_BACKGROUND_COLOR)
        src = f"{icon_url}?{query}"

        icons: list[dict[str, str]] = []
        for size in ICON_SIZES:
            icon = {"src": src, "sizes": size, "type": "image/svg+xml"}
            if size == ICON_SIZES[0]:
                icon["purpose"] = "any maskable"
            icons.append(icon)

        return {
            "name": "Quel io",
            "short_name": "Quel io",
            "description": "Suivez vos horaires de travail",
            "start_url": start_url,
            "display": "standalone",
            "background_color": background_color,
            "theme_color": background_color,
            "orientation": "portrait",
            "icons": icons,
        }
