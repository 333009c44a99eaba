"""Built-in map definitions shipped as JSON files next to this module."""

import logging

from vectormap.constants import MAPS_DIR
from vectormap.core.geometry import MapDefinition, MapRegistry

logger = logging.getLogger(__name__)


def register_builtin_maps() -> list[MapDefinition]:
    """Load and register every *.json map in the package maps directory.

    Returns:
        The registered definitions, sorted by file name.
    """
    definitions = [MapRegistry.load_file(path) for path in sorted(MAPS_DIR.glob("*.json"))]
    logger.info(f"Registered {len(definitions)} built-in map(s)")
    return definitions
