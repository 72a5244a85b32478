"""
Interactive hooks on a rendered report: theme, export menu accessibility,
the embedded result JSON behind "Save as JSON", and initial open/collapsed
state of audit groups.
"""

import json

from bs4 import Tag

from ..dom import DOM
from ..schema import Result

THEMES = ("light", "dark")

# Clumps that start collapsed; every other audit group starts open.
_COLLAPSED_CLUMPS = ("lh-clump--passed",)


class ReportUIFeatures:
    def __init__(self, dom: DOM, theme: str = "light"):
        if theme not in THEMES:
            raise ValueError(f"unknown theme {theme!r} (expected one of {', '.join(THEMES)})")
        self._dom = dom
        self._theme = theme

    @property
    def theme(self) -> str:
        return self._theme

    def init_features(self, result: Result, root: Tag) -> None:
        if self._theme == "dark":
            self._dom.add_class(root, "dark")
        self._setup_export_menu(root)
        self._embed_result_json(result, root)
        self._set_group_state(root)

    def _setup_export_menu(self, root: Tag) -> None:
        button = self._dom.query(".lh-export__button", root)
        if button is None:
            return
        button["aria-haspopup"] = "menu"
        button["aria-expanded"] = "false"
        dropdown = self._dom.query(".lh-export__dropdown", root)
        if dropdown is not None:
            dropdown["role"] = "menu"
            for link in dropdown.select("a"):
                link["role"] = "menuitem"

    def _embed_result_json(self, result: Result, root: Tag) -> None:
        payload = json.dumps(result.model_dump(by_alias=True, mode="json"))
        # Script text is emitted verbatim; "<" must not close the element early.
        payload = payload.replace("<", "\\u003c")
        script = self._dom.create_child_of(root, "script", "lh-report-json", {"type": "application/json"})
        self._dom.set_text_safe(script, payload)

    def _set_group_state(self, root: Tag) -> None:
        for group in root.select("details.lh-audit-group"):
            if any(self._dom.has_class(group, name) for name in _COLLAPSED_CLUMPS):
                if group.has_attr("open"):
                    del group["open"]
            else:
                group["open"] = ""
