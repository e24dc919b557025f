"""RingWorld package: segmented ring-world meshes with proximity-driven LOD.

Import constants FIRST so logging and ``.env`` configuration are set up
before any other module logs.
"""

from ringworld import constants as _constants  # noqa: F401

from ringworld.controller import RingLifecycleController, LifecycleState
from ringworld.errors import RingWorldError, InvalidConfiguration
from ringworld.models import RingConfiguration, RingPlan, Segment
from ringworld.planner import plan, validate
