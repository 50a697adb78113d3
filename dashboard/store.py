"""
dashboard/store.py

In-session owner of the dashboard payload and its transient view state.

Tabs and the active tab's widgets are projections of the current widget list,
recomputed on every read so an edit that moves a widget to another tab can
never leave them stale.
"""

from __future__ import annotations

import logging

from dashboard.schema import ChartWidget, DashboardPayload, TableWidget

logger = logging.getLogger(__name__)

AnyWidget = ChartWidget | TableWidget


class DashboardStore:
    """
    Holds the current payload, the active tab and the single edit target.

    The edit target is global rather than per tab: switching tabs while a
    widget is being edited keeps that widget as the edit target even though it
    is no longer visible.
    """

    def __init__(self) -> None:
        self._payload: DashboardPayload | None = None
        self._active_tab: str | None = None
        self._edit_target: str | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def load(self, payload: DashboardPayload) -> None:
        """
        Replace the whole dashboard; prior widgets and edit state are discarded.
        """

        tabs = _distinct_tabs(payload.widgets)
        self._payload, self._active_tab, self._edit_target = (
            payload,
            tabs[0] if tabs else None,
            None,
        )
        logger.info(
            "Dashboard loaded title=%r widgets=%d tabs=%d",
            payload.title,
            len(payload.widgets),
            len(tabs),
        )

    def clear(self) -> None:
        self._payload, self._active_tab, self._edit_target = None, None, None

    # ------------------------------------------------------------------
    # Projections
    # ------------------------------------------------------------------

    @property
    def payload(self) -> DashboardPayload | None:
        return self._payload

    @property
    def is_loaded(self) -> bool:
        return self._payload is not None

    @property
    def widgets(self) -> list[AnyWidget]:
        return list(self._payload.widgets) if self._payload else []

    @property
    def tabs(self) -> list[str]:
        """
        Distinct widget tabs in first-occurrence order.
        """

        return _distinct_tabs(self.widgets)

    @property
    def active_tab(self) -> str | None:
        tabs = self.tabs
        if self._active_tab in tabs:
            return self._active_tab
        return tabs[0] if tabs else None

    @property
    def active_widgets(self) -> list[AnyWidget]:
        return self.widgets_for_tab(self.active_tab)

    @property
    def edit_target(self) -> str | None:
        return self._edit_target

    def widgets_for_tab(self, tab: str | None) -> list[AnyWidget]:
        if tab is None:
            return []
        return [widget for widget in self.widgets if widget.tab == tab]

    def get_widget(self, widget_id: str) -> AnyWidget | None:
        for widget in self.widgets:
            if widget.id == widget_id:
                return widget
        return None

    # ------------------------------------------------------------------
    # Transitions (silent no-ops on unknown targets)
    # ------------------------------------------------------------------

    def set_active_tab(self, tab: str) -> None:
        if tab in self.tabs:
            self._active_tab = tab

    def update_widget(self, updated: AnyWidget) -> None:
        """
        Replace the widget whose id matches ``updated.id``.
        """

        if self._payload is None:
            return
        widgets = self.widgets
        matches = [index for index, widget in enumerate(widgets) if widget.id == updated.id]
        if len(matches) != 1:
            logger.debug("Ignoring update for unknown widget id=%r", updated.id)
            return
        widgets[matches[0]] = updated
        self._payload = self._payload.model_copy(update={"widgets": widgets})

    def set_edit_target(self, widget_id: str | None) -> None:
        if widget_id is None or self.get_widget(widget_id) is not None:
            self._edit_target = widget_id

    def toggle_edit(self, widget_id: str) -> None:
        if self._edit_target == widget_id:
            self._edit_target = None
        else:
            self.set_edit_target(widget_id)


def _distinct_tabs(widgets: list[AnyWidget]) -> list[str]:
    return list(dict.fromkeys(widget.tab for widget in widgets))
