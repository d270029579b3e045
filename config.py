"""
Local configuration for the map web front-end.

Values here are read at startup; edit them to match your deployment.
"""

PRODUCT_NAME = "mapweb"
PRODUCT_VERSION = "0.1.0"

SERVER_HOST = "0.0.0.0"
SERVER_PORT = 8100

# Web settings document served to the browser front-end.
SETTINGS_FILE = "data/web/settings.json"

# Seconds between background flushes of the settings document (0 disables).
AUTOSAVE_INTERVAL = 300

# Per-map display configuration applied to the settings document at startup.
# Keys follow the map config file names (camelCase or snake_case).
MAP_DEFAULTS = {
    "overworld": {
        "name": "Overworld",
        "world": "world",
        "skyColor": "#7dabff",
        "ambientLight": 0.1,
    },
    "nether": {
        "name": "Nether",
        "world": "world_nether",
        "skyColor": "#290000",
        "ambientLight": 0.6,
        "startPos": {"x": 0, "z": 0},
    },
    "end": {
        "name": "The End",
        "world": "world_the_end",
        "skyColor": "#080010",
        "ambientLight": 1.0,
    },
}
