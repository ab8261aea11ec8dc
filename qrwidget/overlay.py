# -*- coding: utf-8 -*-
"""
QR Status Overlay Module

State machine of the overlay shown on top of the symbol. The host owns the
current status and passes it in; nothing here keeps state.

    ACTIVE  -> LOADING, EXPIRED, SCANNED
    LOADING -> ACTIVE, EXPIRED
    EXPIRED -> ACTIVE   (refresh only)
    SCANNED -> (terminal; a refresh may still resurrect the symbol)

Functions:
    can_transition: True if a status change is an edge of the machine
    transition: Validated status change
    overlay_for: Mask, message and refresh affordance for a status
"""

from typing import Any, Dict, Optional, Protocol, Union

from .errors import StatusTransitionError
from .types import OverlayDescriptor, Status


class RefreshCallback(Protocol):
    """
    Host callback fired when the user activates the refresh affordance.

    It may return new content for the regenerated symbol, or None to keep
    the current content.
    """

    def __call__(self) -> Optional[Union[str, bytes]]:
        ...


class StatusRenderer(Protocol):
    """
    Host hook that draws its own overlay for a non-active status.

    Whatever it returns (markup, a widget, ...) replaces the default message,
    icon and refresh button; the core only carries it to the host.
    """

    def __call__(self, status: Status, on_refresh: Optional[RefreshCallback]) -> Any:
        ...


TRANSITIONS = {
    Status.ACTIVE: frozenset({Status.LOADING, Status.EXPIRED, Status.SCANNED}),
    Status.LOADING: frozenset({Status.ACTIVE, Status.EXPIRED}),
    Status.EXPIRED: frozenset({Status.ACTIVE}),
    Status.SCANNED: frozenset(),
}

MESSAGES: Dict[str, Dict[Any, str]] = {
    'en': {
        Status.LOADING: "Loading...",
        Status.EXPIRED: "QR code expired",
        Status.SCANNED: "Scanned",
        'refresh': "Refresh",
    },
    'zh-CN': {
        Status.LOADING: "加载中...",
        Status.EXPIRED: "二维码已过期",
        Status.SCANNED: "已扫描",
        'refresh': "刷新",
    },
}

DEFAULT_LOCALE = 'en'

_ICONS = {
    Status.LOADING: 'spinner',
    Status.EXPIRED: 'close',
    Status.SCANNED: 'check',
}


def can_transition(current: Status, target: Status) -> bool:
    return target in TRANSITIONS[current]


def transition(current: Status, target: Status, refresh: bool = False) -> Status:
    """
    Move from current to target status.

    Args:
        current (Status): Status the host holds now
        target (Status): Requested status
        refresh (bool): The change comes from the refresh action, which may
            always bring the symbol back to ACTIVE

    Returns:
        Status: The new status

    Raises:
        StatusTransitionError: If the edge does not exist
    """
    if current is target:
        return target
    if refresh and target is Status.ACTIVE:
        return target
    if current is Status.EXPIRED and target is Status.ACTIVE:
        # Leaving EXPIRED is reserved for the refresh action
        raise StatusTransitionError(current, target)
    if not can_transition(current, target):
        raise StatusTransitionError(current, target)
    return target


def messages_for(locale: Optional[str]) -> Dict[Any, str]:
    return MESSAGES.get(locale or DEFAULT_LOCALE, MESSAGES[DEFAULT_LOCALE])


def overlay_for(
    status: Status,
    on_refresh: Optional[RefreshCallback] = None,
    locale: Optional[str] = None,
    status_render: Optional[StatusRenderer] = None
) -> OverlayDescriptor:
    """
    Describe the overlay for a status.

    Args:
        status (Status): Current status
        on_refresh (Optional[RefreshCallback]): Host refresh callback, if any
        locale (Optional[str]): 'en' or 'zh-CN'; unknown locales use 'en'
        status_render (Optional[StatusRenderer]): Custom overlay; its result is
            returned in `custom` and the default content is left empty

    Returns:
        OverlayDescriptor: mask / message / show_refresh / icon

    Example:
        >>> overlay_for(Status.EXPIRED).show_refresh
        False
        >>> overlay_for(Status.EXPIRED, on_refresh=lambda: None).show_refresh
        True
    """
    texts = messages_for(locale)
    if status is Status.ACTIVE:
        return OverlayDescriptor(mask=False, message="", show_refresh=False)

    if status_render is not None:
        return OverlayDescriptor(
            mask=True, message="", show_refresh=False,
            custom=status_render(status, on_refresh),
        )

    show_refresh = status.can_refresh and on_refresh is not None
    return OverlayDescriptor(
        mask=True,
        message=texts[status],
        show_refresh=show_refresh,
        icon=_ICONS[status],
        refresh_label=texts['refresh'] if show_refresh else "",
    )
