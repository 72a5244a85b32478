"""
Report renderer: assembles header, left navigation, run warnings, one section
per category and the footer into a single `.lh-container` root.

Rendering into a container replaces any report previously rendered there.
The result is only read, never modified.
"""

import threading
from typing import Any, Mapping, Optional, Union

from bs4 import BeautifulSoup, Tag

from .. import __version__
from .._util import debug
from ..dom import DOM
from ..errors import MalformedCategory
from ..format import UI_STRINGS, calculate_rating, format_date_time, score_to_percent
from ..schema import Category, Result
from .category import CategoryRenderer
from .performance_category import PERFORMANCE_CATEGORY_ID, PerformanceCategoryRenderer
from .ui_features import ReportUIFeatures

CONTAINER_CLASS = "lh-container"


class ReportRenderer:
    def __init__(
        self,
        dom: DOM,
        category_renderer: CategoryRenderer,
        performance_category_renderer: Optional[PerformanceCategoryRenderer] = None,
        ui_features: Optional[ReportUIFeatures] = None,
    ):
        self._dom = dom
        self._category_renderer = category_renderer
        self._performance_category_renderer = performance_category_renderer
        self._ui_features = ui_features
        self._template_context = dom.document()
        # Held for a whole render and for context switches.
        self._lock = threading.RLock()

    @property
    def template_context(self):
        return self._template_context

    def set_template_context(self, context) -> None:
        """Use `context` as the template source for all subsequent renders."""
        with self._lock:
            self._template_context = context
            self._category_renderer.set_template_context(context)
            if self._performance_category_renderer is not None:
                self._performance_category_renderer.set_template_context(context)

    def render_report(self, result: Union[Result, Mapping[str, Any]], container: Tag) -> Tag:
        """Render `result` into `container`, replacing a previously rendered report.

        `result` may be a Result or its JSON mapping. Returns the new
        `.lh-container` root.
        """
        if not isinstance(result, Result):
            result = Result.model_validate(result)
        with self._lock:
            report = self._render_report(result)
            for previous in container.find_all(class_=CONTAINER_CLASS, recursive=False):
                previous.extract()
            container.append(report)
            if self._ui_features is not None:
                self._ui_features.init_features(result, report)
            return report

    def _render_report(self, result: Result) -> Tag:
        root = self._dom.create_element("div", f"{CONTAINER_CLASS} lh-vars")

        header_container = self._dom.create_child_of(root, "div", "lh-header-container")
        header_container.append(self.render_report_header(result))

        root.append(self.render_report_nav(result))

        report_section = self._dom.create_child_of(root, "div", "lh-report")
        warnings = self.render_report_warnings(result)
        if warnings is not None:
            report_section.append(warnings)

        categories_el = self._dom.create_child_of(report_section, "div", "lh-categories")
        for index, entry in enumerate(result.report_categories):
            try:
                category = _require_category(entry)
            except MalformedCategory as exc:
                debug("report", f"category #{index + 1} skipped: {exc}")
                continue
            renderer = self._category_renderer
            if category.id == PERFORMANCE_CATEGORY_ID and self._performance_category_renderer is not None:
                renderer = self._performance_category_renderer
            categories_el.append(renderer.render(category, result.report_groups))

        report_section.append(self.render_report_footer(result))
        return root

    def render_report_header(self, result: Result) -> BeautifulSoup:
        header = self._dom.clone_template("#tmpl-lh-heading", self._template_context)
        self._dom.set_text_safe(
            self._dom.find(".lh-config__timestamp", header), format_date_time(result.generated_time))

        url = self._dom.find(".lh-metadata__url", header)
        url["href"] = result.final_url
        self._dom.set_text_safe(url, result.final_url)

        self._dom.set_text_safe(self._dom.find(".lh-env__item__ua", header), result.user_agent)
        env = self._dom.find(".lh-env__items", header)
        for setting in result.runtime_config.environment:
            item = self._dom.clone_template("#tmpl-lh-env__items", self._template_context)
            self._dom.set_text_safe(self._dom.find(".lh-env__name", item), setting.name)
            self._dom.set_text_safe(self._dom.find(".lh-env__description", item), setting.description)
            env.append(item)
        return header

    def render_report_nav(self, result: Result) -> BeautifulSoup:
        left_nav = self._dom.clone_template("#tmpl-lh-leftnav", self._template_context)
        self._dom.set_text_safe(
            self._dom.find(".leftnav__header__version", left_nav), f"Version: {_tool_version(result)}")
        nav = self._dom.find(".lh-leftnav", left_nav)
        for entry in result.report_categories:
            if not isinstance(entry, Category):
                continue
            item = self._dom.clone_template("#tmpl-lh-leftnav__items", self._template_context)
            nav_item = self._dom.find(".lh-leftnav__item", item)
            nav_item["href"] = f"#{entry.id}"
            self._dom.set_text_safe(self._dom.find(".leftnav-item__category", nav_item), entry.name)
            score = self._dom.find(".leftnav-item__score", nav_item)
            if entry.score is None:
                self._dom.add_class(score, "lh-score__value--not-applicable")
                self._dom.set_text_safe(score, UI_STRINGS["notApplicableScore"])
            else:
                self._dom.add_class(score, f"lh-score__value--{calculate_rating(entry.score)}")
                self._dom.set_text_safe(score, score_to_percent(entry.score))
            nav.append(item)
        return left_nav

    def render_report_warnings(self, result: Result) -> Optional[BeautifulSoup]:
        """The run-warnings banner, or None when the run produced no warnings."""
        if not result.run_warnings:
            return None
        banner = self._dom.clone_template("#tmpl-lh-run-warnings", self._template_context)
        warnings_list = self._dom.find("ul", banner)
        for warning in result.run_warnings:
            self._dom.set_text_safe(self._dom.create_child_of(warnings_list, "li"), warning)
        return banner

    def render_report_footer(self, result: Result) -> BeautifulSoup:
        footer = self._dom.clone_template("#tmpl-lh-footer", self._template_context)
        self._dom.set_text_safe(self._dom.find(".lh-footer__version", footer), _tool_version(result))
        self._dom.set_text_safe(
            self._dom.find(".lh-footer__timestamp", footer), format_date_time(result.generated_time))
        return footer


def _require_category(entry: Any) -> Category:
    if not isinstance(entry, Category):
        kind = f"mapping with keys {sorted(entry)}" if isinstance(entry, dict) else type(entry).__name__
        raise MalformedCategory(f"not a valid category: {kind}")
    return entry


def _tool_version(result: Result) -> str:
    """Version shown in the nav and footer; results without one show ours."""
    return result.lighthouse_version or __version__
