"""
Category renderer: one report section with its header, score gauge and audits.

Audits render in the order the category lists them. An audit that cannot be
rendered becomes a marked placeholder row and the rest of the category still
renders; missing templates or elements propagate to the caller.
"""

from typing import Any, Callable, Dict, List, Optional

from bs4 import Tag

from .._util import debug
from ..dom import DOM
from ..errors import MalformedAudit
from ..format import (
    UI_STRINGS,
    calculate_rating,
    format_display_value,
    score_to_percent,
)
from ..schema import Audit, AuditGroup, Category, ScoreDisplayMode
from .details import DetailsRenderer

# Circumference of the gauge arc (2 * pi * r, r=53).
_GAUGE_ARC_LENGTH = 333

_CLUMP_TITLES = {
    "passed": UI_STRINGS["passedAuditsGroupTitle"],
}

# Errors from reading one audit's data; anything else propagates.
_AUDIT_DATA_ERRORS = (MalformedAudit, AttributeError, KeyError, TypeError, ValueError)


class CategoryRenderer:
    def __init__(self, dom: DOM, details_renderer: DetailsRenderer):
        self._dom = dom
        self._details_renderer = details_renderer
        self._template_context = dom.document()

    @property
    def dom(self) -> DOM:
        return self._dom

    @property
    def details_renderer(self) -> DetailsRenderer:
        return self._details_renderer

    @property
    def template_context(self):
        return self._template_context

    def set_template_context(self, context) -> None:
        self._template_context = context
        self._details_renderer.set_template_context(context)

    # -- header -------------------------------------------------------------

    def render_score_gauge(self, category: Category) -> Tag:
        fragment = self._dom.clone_template("#tmpl-lh-gauge", self._template_context)
        wrapper = self._dom.find(".lh-gauge__wrapper", fragment)
        wrapper["href"] = f"#{category.id}"
        percentage = self._dom.find(".lh-gauge__percentage", fragment)

        if category.score is None:
            self._dom.add_class(wrapper, "lh-gauge__wrapper--not-applicable")
            self._dom.set_text_safe(percentage, UI_STRINGS["notApplicableScore"])
            percentage["title"] = "Not applicable"
        else:
            self._dom.add_class(wrapper, f"lh-gauge__wrapper--{calculate_rating(category.score)}")
            self._dom.set_text_safe(percentage, score_to_percent(category.score))

        arc = self._dom.query(".lh-gauge-arc", fragment)
        if arc is not None:
            arc["style"] = f"stroke-dasharray: {float(category.score or 0) * _GAUGE_ARC_LENGTH:.1f} {_GAUGE_ARC_LENGTH}"
        self._dom.set_text_safe(self._dom.find(".lh-gauge__label", fragment), category.name)
        return wrapper.extract()

    def render_category_header(self, category: Category) -> Tag:
        fragment = self._dom.clone_template("#tmpl-lh-category-header", self._template_context)
        self._dom.find(".lh-score__gauge", fragment).append(self.render_score_gauge(category))
        self._dom.find(".lh-category-header__title", fragment).append(
            self._dom.convert_markdown_code_snippets(category.name))
        if category.description:
            self._dom.find(".lh-category-header__description", fragment).append(
                self._dom.convert_markdown_link_snippets(category.description))
        return self._dom.find(".lh-category-header", fragment).extract()

    def create_permalink(self, element: Tag, category_id: str) -> None:
        if category_id:
            self._dom.create_child_of(element, "span", "lh-permalink", {"id": category_id})

    # -- audits -------------------------------------------------------------

    def render_audit(self, audit: Any, index: int) -> Tag:
        fragment = self._dom.clone_template("#tmpl-lh-audit", self._template_context)
        return self.populate_audit_values(self.require_audit(audit), index, fragment)

    def populate_audit_values(self, audit: Audit, index: int, fragment) -> Tag:
        audit_el = self._dom.find(".lh-audit", fragment)
        if audit.id:
            audit_el["id"] = audit.id
        mode = audit.mode

        display_el = self._dom.find(".lh-audit__display-text", audit_el)
        if audit.display_value:
            self._dom.set_text_safe(display_el, format_display_value(audit.display_value))

        title_el = self._dom.find(".lh-audit__title", audit_el)
        title_el.append(self._dom.convert_markdown_code_snippets(audit.title))
        self._dom.find(".lh-audit__description", audit_el).append(
            self._dom.convert_markdown_link_snippets(audit.description))

        if audit.details:
            details_fragment = self._details_renderer.render(audit.details)
            if details_fragment.contents:
                self._dom.find("details", audit_el).append(details_fragment)

        self._dom.set_text_safe(self._dom.find(".lh-audit__index", audit_el), index + 1)
        chevron = self._dom.query(".lh-chevron-container", audit_el)
        if chevron is not None:
            chevron.append(self._create_chevron())

        rating = calculate_rating(audit.score, mode.value)
        self._dom.add_class(audit_el, f"lh-audit--{rating}", f"lh-audit--{mode.value}")

        if mode is ScoreDisplayMode.ERROR:
            self._dom.set_text_safe(display_el, UI_STRINGS["errorLabel"])
            self._dom.add_class(display_el, "tooltip-boundary")
            tooltip = self._dom.create_child_of(display_el, "div", "tooltip tooltip--error")
            self._dom.set_text_safe(tooltip, audit.error_message or UI_STRINGS["errorMissingAuditInfo"])
        elif audit.explanation:
            explanation = self._dom.create_child_of(title_el, "div", "lh-audit-explanation")
            self._dom.set_text_safe(explanation, audit.explanation)

        if audit.warnings:
            warnings_el = self._dom.create_child_of(title_el, "div", "lh-warnings")
            if len(audit.warnings) == 1:
                self._dom.set_text_safe(warnings_el, UI_STRINGS["warningHeader"] + audit.warnings[0])
            else:
                self._dom.set_text_safe(warnings_el, UI_STRINGS["warningHeader"])
                warnings_list = self._dom.create_child_of(warnings_el, "ul")
                for warning in audit.warnings:
                    self._dom.set_text_safe(self._dom.create_child_of(warnings_list, "li"), warning)
        return audit_el.extract()

    def require_audit(self, entry: Any) -> Audit:
        if not isinstance(entry, Audit):
            raise MalformedAudit(f"not a valid audit: {_describe(entry)}")
        return entry

    def render_isolated(self, render_fn: Callable[[Any, int], Tag], entry: Any, index: int) -> Tag:
        """Run one per-audit render; a data defect yields a placeholder row instead."""
        try:
            return render_fn(entry, index)
        except _AUDIT_DATA_ERRORS as exc:
            debug("category", f"audit #{index + 1} skipped: {exc}")
            return self._render_malformed_audit(entry, index)

    def render_audit_entry(self, entry: Any, index: int) -> Tag:
        return self.render_isolated(self.render_audit, entry, index)

    def _render_malformed_audit(self, entry: Any, index: int) -> Tag:
        audit_el = self._dom.create_element("div", "lh-audit lh-audit--malformed")
        audit_id = entry.get("id") if isinstance(entry, dict) else getattr(entry, "id", None)
        if isinstance(audit_id, str) and audit_id:
            audit_el["id"] = audit_id
        title = self._dom.create_child_of(audit_el, "span", "lh-audit__title")
        self._dom.set_text_safe(title, f"{index + 1}. {UI_STRINGS['malformedAuditLabel']}")
        return audit_el

    def _create_chevron(self) -> Tag:
        svg = self._dom.create_element("svg", "lh-chevron", {"viewBox": "0 0 100 100"})
        lines = self._dom.create_child_of(svg, "g", "lh-chevron__lines")
        self._dom.create_child_of(lines, "path", "lh-chevron__line lh-chevron__line-left", {"d": "M10 50h40"})
        self._dom.create_child_of(lines, "path", "lh-chevron__line lh-chevron__line-right", {"d": "M90 50H50"})
        return svg

    # -- groups -------------------------------------------------------------

    def render_audit_group(self, group: Optional[AuditGroup], expandable: bool = True) -> Tag:
        fragment = self._dom.clone_template("#tmpl-lh-audit-group", self._template_context)
        group_el = self._dom.find(".lh-audit-group", fragment)
        if group is not None:
            self._dom.set_text_safe(self._dom.find(".lh-audit-group__title", fragment), group.title)
            if group.description:
                self._dom.find(".lh-audit-group__description", fragment).append(
                    self._dom.convert_markdown_link_snippets(group.description))
        if not expandable:
            group_el["open"] = ""
            self._dom.add_class(group_el, "lh-audit-group--unexpandable")
        return group_el.extract()

    def render_clump(self, kind: str, audits: List[Any], start_index: int = 0) -> Tag:
        """Collapsed group of audits (e.g. passed) with an item count in its summary."""
        group_el = self.render_audit_group(AuditGroup(title=_CLUMP_TITLES.get(kind, kind)))
        self._dom.add_class(group_el, f"lh-clump--{kind}")
        self._dom.set_text_safe(self._dom.find(".lh-audit-group__itemcount", group_el), f"({len(audits)})")
        group_el["title"] = UI_STRINGS["auditGroupExpandTooltip"]
        for offset, entry in enumerate(audits):
            group_el.append(self.render_audit_entry(entry, start_index + offset))
        return group_el

    # -- category -----------------------------------------------------------

    def render(self, category: Category, groups: Optional[Dict[str, AuditGroup]] = None) -> Tag:
        element = self._dom.create_element("div", "lh-category")
        self.create_permalink(element, category.id)
        element.append(self.render_category_header(category))
        audits_el = self._dom.create_child_of(element, "div", "lh-audits")
        for index, entry in enumerate(category.audits):
            audits_el.append(self.render_audit_entry(entry, index))
        return element


def _describe(entry: Any) -> str:
    if isinstance(entry, dict):
        return f"mapping with keys {sorted(entry)}"
    return type(entry).__name__
