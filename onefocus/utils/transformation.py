from typing import Optional

EM_DASH_SEPARATOR = ' — '
PLAIN_DASH_SEPARATOR = ' - '
SIGNATURE_SEPARATOR = '::'


def extract_workspace_name(window_title: Optional[str]) -> Optional[str]:
    """Derives the workspace label from an editor window title.

    Editors title their windows ``<file> — <workspace>``. The em dash
    separator wins over a plain `` - ``; the segment after the last
    occurrence of the separator is the workspace name.

    Args:
        window_title: Raw window title.

    Returns:
        The trimmed trailing segment, or None when the title has no separator.

    Examples:
        >>> extract_workspace_name("Foo — bar.code-workspace")
        'bar.code-workspace'
        >>> extract_workspace_name("Foo - baz")
        'baz'
        >>> extract_workspace_name("Foo") is None
        True
    """
    if not window_title:
        return None

    for separator in (EM_DASH_SEPARATOR, PLAIN_DASH_SEPARATOR):
        if separator in window_title:
            segment = window_title.split(separator)[-1].strip()
            return segment or None

    return None


def matches_window(title: str, target_title: Optional[str] = None,
                   workspace_hint: Optional[str] = None) -> bool:
    """Tells whether a live window title matches a recorded target.

    An exact title match always wins. Otherwise the workspace hint is
    compared with the trailing ``— <workspace>`` segment first and then
    with a plain suffix of the title.
    """
    if target_title and title == target_title:
        return True
    if not workspace_hint:
        return False
    if title.endswith('— ' + workspace_hint):
        return True
    return title.endswith(workspace_hint)


def window_signature(app_id: str, title: str) -> str:
    """Identity of a focus signal used for debouncing."""
    return f"{app_id}{SIGNATURE_SEPARATOR}{title}"


def window_label(window_title: str) -> str:
    """Human readable label for a window: its workspace name or the trimmed title."""
    return extract_workspace_name(window_title) or window_title.strip()


def is_dot_suffixed(label: Optional[str]) -> bool:
    """Placeholder windows carry a label ending with a literal dot."""
    return bool(label) and label.endswith('.')
