"""Configuration constants, paths, and default terrain regions."""

import os
import pathlib
import logging

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

BASE_DIR = pathlib.Path(__file__).parent.parent.absolute()
OUTPUT_DIR = pathlib.Path(os.environ.get("RINGWORLD_OUTPUT_DIR",
                                         BASE_DIR / "output"))
TEXTURE_DIR = pathlib.Path(os.environ.get("RINGWORLD_TEXTURE_DIR",
                                          OUTPUT_DIR / "ProceduralTextures"))

# ── Ring defaults ─────────────────────────────────────────────────────
DEFAULT_SEGMENT_COUNT = 4
DEFAULT_WIDTH_M = 300.0
DEFAULT_RADIUS_M = 10000.0
DEFAULT_VERTS_ALONG_WIDTH = 16
DEFAULT_VERTS_ALONG_EDGE = 2
DEFAULT_MIN_SEGMENT_INDEX = -1
DEFAULT_MAX_SEGMENT_INDEX = 360
DEFAULT_MAX_LOD = 6
DEFAULT_PROXIMITY_THRESHOLD = 300.0
DEFAULT_TICK_INTERVAL = 1.0
DEFAULT_TEXTURE_METERS_PER_PIXEL = 5.0

# Largest texture edge written to disk, in pixels
MAX_TEXTURE_EDGE_PX = 4096

# ── Terrain regions: (name, normalised height upper bound, RGB) ──────
DEFAULT_REGIONS = (
    ("deep_water", 0.30, (16, 42, 110)),
    ("shallow_water", 0.40, (40, 90, 170)),
    ("sand", 0.45, (210, 200, 125)),
    ("grass", 0.55, (86, 152, 23)),
    ("forest", 0.60, (62, 107, 18)),
    ("rock", 0.70, (90, 69, 60)),
    ("high_rock", 0.90, (75, 60, 53)),
    ("snow", 1.00, (240, 240, 240)),
)

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)
