"""
Performance category: metrics, filmstrip timeline, load opportunities and
diagnostics. Audits without a performance group render as in any category.
"""

import math
from typing import Any, Dict, List, Optional

from bs4 import Tag
from pydantic import ValidationError

from ..format import (
    UI_STRINGS,
    calculate_rating,
    format_display_value,
    format_seconds,
    show_as_passed,
)
from ..schema import Audit, AuditGroup, Category, OpportunityDetails, ScoreDisplayMode
from .category import CategoryRenderer

PERFORMANCE_CATEGORY_ID = "performance"
PERFORMANCE_GROUPS = ("metrics", "load-opportunities", "diagnostics")
THUMBNAIL_AUDIT_ID = "screenshot-thumbnails"

# Smallest sparkline scale, in ms.
_MINIMUM_SPARKLINE_SCALE = 2000


class PerformanceCategoryRenderer(CategoryRenderer):
    def _render_metric(self, audit: Any, index: int) -> Tag:
        audit = self.require_audit(audit)
        fragment = self.dom.clone_template("#tmpl-lh-metric", self.template_context)
        element = self.dom.find(".lh-metric", fragment)
        if audit.id:
            element["id"] = audit.id
        mode = audit.mode
        self.dom.add_class(element, f"lh-metric--{calculate_rating(audit.score, mode.value)}")
        self.dom.set_text_safe(self.dom.find(".lh-metric__title", fragment), audit.title)

        value_el = self.dom.find(".lh-metric__value", fragment)
        description_el = self.dom.find(".lh-metric__description", fragment)
        if mode is ScoreDisplayMode.ERROR:
            self.dom.set_text_safe(value_el, UI_STRINGS["errorLabel"])
            tooltip = self.dom.create_child_of(description_el, "span", "lh-error-tooltip-content")
            self.dom.set_text_safe(tooltip, audit.error_message or "Report error: no metric information")
        else:
            self.dom.set_text_safe(value_el, format_display_value(audit.display_value))
            description_el.append(self.dom.convert_markdown_link_snippets(audit.description))
        return element.extract()

    def _render_opportunity(self, audit: Any, index: int, scale: float) -> Tag:
        audit = self.require_audit(audit)
        fragment = self.dom.clone_template("#tmpl-lh-opportunity", self.template_context)
        element = self.populate_audit_values(audit, index, fragment)
        if not isinstance(audit.details, dict) or audit.details.get("type") != "opportunity":
            return element

        wasted_ms = self.get_wasted_ms(audit)
        bar = self.dom.find(".lh-sparkline__bar", element)
        bar["style"] = f"width: {wasted_ms / scale * 100:.2f}%"
        display_el = self.dom.find(".lh-audit__display-text", element)
        self.dom.set_text_safe(display_el, format_seconds(wasted_ms, 0.01))
        if audit.display_value:
            display_value = format_display_value(audit.display_value)
            self.dom.find(".lh-load-opportunity__sparkline", element)["title"] = display_value
            display_el["title"] = display_value
        return element

    @staticmethod
    def get_wasted_ms(audit: Any) -> float:
        """Estimated savings of an opportunity audit; 0 for anything else."""
        details = audit.details if isinstance(audit, Audit) else None
        if not isinstance(details, dict) or details.get("type") != "opportunity":
            return 0.0
        try:
            return OpportunityDetails.model_validate(details).overall_savings_ms
        except ValidationError:
            return 0.0

    @staticmethod
    def _diagnostic_sort_key(audit: Audit) -> float:
        if audit.mode is ScoreDisplayMode.INFORMATIVE:
            return 100.0
        return float(audit.score or 0)

    def _render_metrics(self, element: Tag, metrics: List[Audit], group: Optional[AuditGroup]) -> None:
        group_el = self.render_audit_group(group, expandable=False)
        self.dom.add_class(group_el, "lh-audit-group--metrics")
        boxes = self.dom.create_child_of(group_el, "div", "lh-metrics-container")
        for index, audit in enumerate(metrics):
            boxes.append(self.render_isolated(self._render_metric, audit, index))
        disclaimer = self.dom.create_child_of(group_el, "div", "lh-metrics__disclaimer")
        self.dom.set_text_safe(disclaimer, UI_STRINGS["varianceDisclaimer"])
        element.append(group_el)

    def _render_timeline(self, element: Tag, audits: List[Audit]) -> None:
        timeline_el = self.dom.create_child_of(element, "div", "lh-filmstrip-container")
        thumbnails = next((a for a in audits if a.id == THUMBNAIL_AUDIT_ID), None)
        if thumbnails is not None and thumbnails.details:
            timeline_el["id"] = thumbnails.id
            timeline_el.append(self.details_renderer.render(thumbnails.details))

    def _render_opportunities(self, element: Tag, opportunities: List[Audit], group: Optional[AuditGroup]) -> None:
        max_waste = max(self.get_wasted_ms(a) for a in opportunities)
        scale = max(math.ceil(max_waste / 1000) * 1000, _MINIMUM_SPARKLINE_SCALE)

        group_el = self.render_audit_group(group, expandable=False)
        self.dom.add_class(group_el, "lh-audit-group--load-opportunities")
        header = self.dom.clone_template("#tmpl-lh-opportunity-header", self.template_context)
        self.dom.set_text_safe(self.dom.find(".lh-load-opportunity__col--one", header),
                               UI_STRINGS["opportunityResourceColumnLabel"])
        self.dom.set_text_safe(self.dom.find(".lh-load-opportunity__col--two", header),
                               UI_STRINGS["opportunitySavingsColumnLabel"])
        group_el.append(self.dom.find(".lh-load-opportunity__header", header).extract())
        for index, audit in enumerate(opportunities):
            group_el.append(self.render_isolated(
                lambda entry, i: self._render_opportunity(entry, i, scale), audit, index))
        element.append(group_el)

    def _render_diagnostics(self, element: Tag, diagnostics: List[Audit], group: Optional[AuditGroup]) -> None:
        group_el = self.render_audit_group(group, expandable=False)
        self.dom.add_class(group_el, "lh-audit-group--diagnostics")
        for index, audit in enumerate(diagnostics):
            group_el.append(self.render_audit_entry(audit, index))
        element.append(group_el)

    def render(self, category: Category, groups: Optional[Dict[str, AuditGroup]] = None) -> Tag:
        groups = groups or {}
        element = self.dom.create_element("div", "lh-category")
        self.create_permalink(element, category.id)
        element.append(self.render_category_header(category))

        audits = [entry for entry in category.audits if isinstance(entry, Audit)]

        metrics = [a for a in audits if a.group == "metrics"]
        if metrics:
            self._render_metrics(element, metrics, groups.get("metrics"))

        self._render_timeline(element, audits)

        opportunities = sorted(
            (a for a in audits if a.group == "load-opportunities" and not show_as_passed(a)),
            key=self.get_wasted_ms,
            reverse=True,
        )
        if opportunities:
            self._render_opportunities(element, opportunities, groups.get("load-opportunities"))

        diagnostics = sorted(
            (a for a in audits if a.group == "diagnostics" and not show_as_passed(a)),
            key=self._diagnostic_sort_key,
        )
        if diagnostics:
            self._render_diagnostics(element, diagnostics, groups.get("diagnostics"))

        passed = [a for a in audits if a.group in ("load-opportunities", "diagnostics") and show_as_passed(a)]
        if passed:
            element.append(self.render_clump("passed", passed))

        # Audits without performance metadata (and malformed entries) keep
        # their original order and the base rendering.
        others = [
            entry for entry in category.audits
            if not (isinstance(entry, Audit) and (entry.group in PERFORMANCE_GROUPS or entry.id == THUMBNAIL_AUDIT_ID))
        ]
        if others:
            others_el = self.dom.create_child_of(element, "div", "lh-audits")
            for index, entry in enumerate(others):
                others_el.append(self.render_audit_entry(entry, index))
        return element
