"""Curated child-label suggestions."""

from typing import List

# Expansions for recognised labels, in display order.
SUGGESTIONS = {
    "Central Idea": ["Feature 1", "User Benefits", "Technical Stack", "Business Model"],
    "Feature 1": ["Drag & Drop", "Real-time Updates", "Export Options"],
    "User Benefits": ["Improved Productivity", "Visual Organization", "Brainstorming Tool"],
    "Technical Stack": ["Front-end", "Back-end", "Database", "AI Components"],
    "Business Model": ["Freemium", "Subscription", "Enterprise"],
    "Drag & Drop": ["Touch Support", "Multi-select", "Grouping"],
    "Export Options": ["PNG", "PDF", "SVG", "JSON"],
    "AI Components": ["NLP Processing", "Suggestion Engine", "Auto-layout"],
}

FALLBACK_SUGGESTIONS = ("New Idea", "Related Concept", "Example", "Sub-category")

MAX_SUGGESTIONS = 4


def generate_suggestions(label: str) -> List[str]:
    """Return candidate child labels for a node label."""
    return list(SUGGESTIONS.get(label, FALLBACK_SUGGESTIONS))[:MAX_SUGGESTIONS]
