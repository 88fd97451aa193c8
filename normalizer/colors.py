"""Category color lookup shared by the event and announcement normalizers."""
import logging
from typing import Dict, Optional

logger = logging.getLogger(__name__)

RESOURCES_COLLECTION = 'resources'
CATEGORY_COLORS_DOC = 'categoryColors'
DEFAULT_CATEGORY = 'Default'


def load_category_colors(store) -> Dict[str, str]:
    """Read the externally maintained category color table."""
    colors = store.collection(RESOURCES_COLLECTION).doc(CATEGORY_COLORS_DOC).get()
    if colors is None:
        logger.warning(
            f"No {RESOURCES_COLLECTION}/{CATEGORY_COLORS_DOC} document found; "
            "header colors will be empty"
        )
        return {}
    return colors


def resolve_header_color(colors: Dict[str, str], category: Optional[str]) -> Optional[str]:
    """Return the category's color, falling back to the table's Default entry."""
    return colors.get(category) or colors.get(DEFAULT_CATEGORY)
