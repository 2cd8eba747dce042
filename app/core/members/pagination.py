"""Page window helpers for the member list"""
from typing import List

# Buttons shown either side of the current page
WINDOW_SPAN = 2


def clamp_page(page: int, last_page: int) -> int:
    """Clamp a page number to [1, last_page]"""
    return max(1, min(page, max(last_page, 1)))


def visible_page_window(current_page: int, last_page: int, span: int = WINDOW_SPAN) -> List[int]:
    """Selectable page numbers around the current page

    Args:
        current_page: Page being shown
        last_page: Last available page
        span: Pages shown either side of current_page

    Returns:
        List[int]: Inclusive range [max(1, P - span), min(L, P + span)],
        at most 2 * span + 1 entries
    """
    min_page = max(1, current_page - span)
    max_page = min(last_page, current_page + span)
    return list(range(min_page, max_page + 1))
