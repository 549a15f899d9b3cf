"""Default entity catalog and relationship rules for macOS architecture guides."""

from __future__ import annotations

from typing import Dict, List, Tuple

from .base import EntityCategory

# category -> (ignore_case, canonical name -> aliases)
DEFAULT_CATALOG: Dict[str, Tuple[bool, Dict[str, List[str]]]] = {
    EntityCategory.FRAMEWORK.value: (
        False,
        {
            "SwiftUI": [],
            "AppKit": [],
            "UIKit": [],
            "Mac Catalyst": ["Catalyst"],
            "Cocoa": [],
            "Foundation": [],
            "Core Foundation": ["CoreFoundation"],
            "Metal": [],
            "Core Animation": ["CoreAnimation"],
            "Core Graphics": ["CoreGraphics", "Quartz 2D"],
            "Core Image": ["CoreImage"],
            "Core Text": ["CoreText"],
            "Core Data": ["CoreData"],
            "Combine": [],
            "SpriteKit": [],
            "SceneKit": [],
            "RealityKit": [],
            "AVFoundation": [],
            "Grand Central Dispatch": ["GCD", "libdispatch"],
            "IOKit": [],
            "XPC": [],
        },
    ),
    EntityCategory.APP_TYPE.value: (
        True,
        {
            "document-based app": ["document-based apps", "document based app", "document based apps"],
            "menu bar app": ["menu bar apps", "menu bar extra", "menu bar extras"],
            "game": ["games"],
            "utility app": ["utility apps", "utilities"],
            "productivity app": ["productivity apps"],
            "media app": ["media apps"],
            "command-line tool": ["command-line tools", "command line tool", "command line tools"],
        },
    ),
    EntityCategory.LAYER.value: (
        False,
        {
            "Darwin": [],
            "XNU": [],
            "Mach": [],
            "BSD": [],
            "Core OS": [],
            "Core Services": [],
            "Media layer": ["Media Layer", "media layer"],
            "Application layer": ["Application Layer", "application layer"],
        },
    ),
}

# (relation, source column, target column); headers compare case-insensitively.
DEFAULT_TABLE_RULES: List[Tuple[str, str, str]] = [
    ("recommendedFor", "Recommended Framework", "App Type"),
    ("recommendedFor", "Framework", "App Type"),
    ("layerAbove", "Layer", "Built On"),
]

# (relation, connector pattern between two mentions, reverse)
DEFAULT_PHRASE_RULES: List[Tuple[str, str, bool]] = [
    (
        "recommendedFor",
        r"\s+(?:is|are)\s+(?:the\s+)?(?:recommended|preferred|best\s+suited)\s+(?:choice\s+)?for\s+(?:(?:an?|the|most)\s+)?",
        False,
    ),
    (
        "recommendedFor",
        r"\s+should\s+(?:use|adopt)\s+",
        True,
    ),
    (
        "contraindicatedFor",
        r"\s+(?:is|are)\s+not\s+(?:recommended|suited)\s+for\s+(?:(?:an?|the)\s+)?",
        False,
    ),
    (
        "layerAbove",
        r"\s+(?:sits|is\s+layered|is\s+built|runs)\s+(?:directly\s+)?(?:above|on\s+top\s+of|on)\s+(?:the\s+)?",
        False,
    ),
]
