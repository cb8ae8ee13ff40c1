"""Color palette constants for dark theme."""

# Base theme colors
BACKGROUND = "#0F172A"
PANEL_BG = "#1E293B"

# Accent colors
ACCENT = "#3B82F6"

# Text colors
TEXT_PRIMARY = "#F8FAFC"
TEXT_DISABLED = "#64748B"

# Faction display colors
FACTION_COLORS: dict[str, str] = {
    "MUD": "#EF4444",
    "ONI": "#3B82F6",
    "UST": "#F59E0B",
    "Neutral": "#94A3B8",
}
