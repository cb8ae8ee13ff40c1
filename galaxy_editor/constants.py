"""Application-wide constants.

Reference: editor defaults carried over from the map editor's global state.
"""

APP_NAME = "Galaxy Map Editor"
APP_VERSION = "0.1.0"
APP_ORGANIZATION = "SAGE"

# Window constraints
MIN_WINDOW_WIDTH = 1280
MIN_WINDOW_HEIGHT = 800

# History
MAX_HISTORY = 50

# View transform defaults (map units -> screen pixels)
DEFAULT_SCALE = 5.0
DEFAULT_OFFSET_X = 400.0
DEFAULT_OFFSET_Y = 300.0
MIN_SCALE = 0.1
MAX_SCALE = 100.0

# Canvas grid
GALAXY_GRID_SPACING = 10.0  # map units

# Hit testing
SYSTEM_HIT_RADIUS_PX = 8.0

# System defaults
DEFAULT_CONTROLLING_FACTION = "Neutral"
DEFAULT_STAR_NAME = "Solar"
DEFAULT_STAR_TYPE = 2
FACTIONS = ["MUD", "ONI", "UST"]
CONTROLLING_FACTIONS = ["MUD", "ONI", "UST", "Neutral"]
MAX_STARBASE_TIER = 5
MAX_STARS_PER_SYSTEM = 3

# Default planet type per system faction (terrestrial archetype)
DEFAULT_PLANET_TYPES = {"ONI": 0, "MUD": 8, "UST": 16, "Neutral": 24}

# Region defaults
DEFAULT_REGION_COLOR = "#3B82F6"
