"""
Details renderer: turns an audit's `details` payload into a fragment.

Dispatch is on the payload's `type` tag. Tags this renderer does not know,
and payloads that do not validate against the model for their tag, render as
an empty fragment so a newer result format never breaks the whole report.
"""

from typing import Any, Callable, Dict, Optional

from bs4 import BeautifulSoup, Tag
from pydantic import ValidationError

from .._util import debug
from ..dom import DOM
from ..errors import MalformedDetail
from ..format import (
    format_bytes_to_kb,
    format_duration,
    format_milliseconds,
    format_number,
    parse_url,
)
from ..schema import (
    CodeDetails,
    CriticalRequestChainDetails,
    FilmstripDetails,
    LinkDetails,
    ListDetails,
    NodeDetails,
    OpportunityDetails,
    TableDetails,
    TableHeading,
    ValueDetails,
)
from .crc_details import CriticalRequestChainRenderer

# Internal-only details types that carry data for other consumers.
_SILENT_TYPES = ("screenshot", "diagnostic")

_URL_PREFIXES = ("http://", "https://", "data:")


class DetailsRenderer:
    def __init__(self, dom: DOM):
        self._dom = dom
        self._template_context = dom.document()
        self._renderers: Dict[str, Callable[[Dict[str, Any]], Optional[Tag]]] = {
            "table": self._render_table,
            "opportunity": self._render_opportunity_table,
            "criticalrequestchain": self._render_crc,
            "list": self._render_list,
            "code": self._render_code_details,
            "filmstrip": self._render_filmstrip,
            "text": self._render_text_details,
            "url": self._render_url_details,
            "thumbnail": self._render_thumbnail_details,
            "numeric": self._render_numeric_details,
            "bytes": self._render_bytes_details,
            "ms": self._render_ms_details,
            "node": self._render_node_details,
            "link": self._render_link_details,
        }

    @property
    def dom(self) -> DOM:
        return self._dom

    def set_template_context(self, context) -> None:
        self._template_context = context

    def render(self, details: Any) -> BeautifulSoup:
        """Render `details` into a fragment whose top-level element has class lh-details."""
        fragment = self._dom.create_fragment()
        try:
            element = self._render_element(details)
        except MalformedDetail as exc:
            debug("details", str(exc))
            return fragment
        if element is not None:
            self._dom.add_class(element, "lh-details")
            fragment.append(element)
        return fragment

    def _render_element(self, details: Any) -> Optional[Tag]:
        if not isinstance(details, dict):
            raise MalformedDetail(f"details is not a mapping: {type(details).__name__}")
        detail_type = details.get("type")
        if detail_type in _SILENT_TYPES:
            return None
        renderer = self._renderers.get(detail_type) if isinstance(detail_type, str) else None
        if renderer is None:
            raise MalformedDetail(f"unknown details type: {detail_type!r}")
        try:
            return renderer(details)
        except (ValidationError, TypeError, ValueError) as exc:
            raise MalformedDetail(f"invalid {detail_type} details: {exc}") from exc

    # -- scalar values ------------------------------------------------------

    def render_text(self, text: Any) -> Tag:
        element = self._dom.create_element("div", "lh-text")
        return self._dom.set_text_safe(element, text)

    def render_text_url(self, url: str) -> Tag:
        """URL cell: shortened path plus host, full URL as the title."""
        try:
            parsed = parse_url(url)
        except ValueError:
            displayed_path, displayed_host, title = url, "", None
        else:
            at_root = parsed["file"] == "/"
            displayed_path = parsed["origin"] if at_root else parsed["file"]
            displayed_host = "" if at_root else f"({parsed['hostname']})"
            title = url
        element = self._dom.create_element("div", "lh-text__url")
        element.append(self.render_text(displayed_path))
        if displayed_host:
            host_el = self.render_text(displayed_host)
            self._dom.add_class(host_el, "lh-text__url-host")
            element.append(host_el)
        if title:
            element["title"] = title
        return element

    def render_link(self, text: str, url: str) -> Tag:
        if not url.startswith(("http://", "https://")):
            return self.render_text(text)
        link = self._dom.create_element("a", attrs={"rel": "noopener", "target": "_blank", "href": url})
        return self._dom.set_text_safe(link, text)

    def render_node(self, path: Optional[str], selector: Optional[str], snippet: Optional[str]) -> Tag:
        element = self._dom.create_element("span", "lh-node")
        if snippet:
            self._dom.set_text_safe(element, snippet)
            element["data-snippet"] = snippet
        if selector:
            element["title"] = selector
            element["data-selector"] = selector
        if path:
            element["data-path"] = path
        return element

    def render_code(self, text: Any) -> Tag:
        pre = self._dom.create_element("pre", "lh-code")
        return self._dom.set_text_safe(pre, text)

    def _render_numeric(self, text: Any) -> Tag:
        element = self._dom.create_element("div", "lh-numeric")
        return self._dom.set_text_safe(element, text)

    def _render_thumbnail(self, src: str) -> Tag:
        return self._dom.create_element("img", "lh-thumbnail", {"src": src, "title": src, "alt": ""})

    def _render_bytes(self, value: float, granularity: Optional[float]) -> Tag:
        return self.render_text(format_bytes_to_kb(value, granularity or 0.1))

    def _render_milliseconds(self, value: float, granularity: Optional[float], display_unit: Optional[str]) -> Tag:
        if display_unit == "duration":
            return self.render_text(format_duration(value))
        return self.render_text(format_milliseconds(value, granularity or 10))

    def _render_text_details(self, details: Dict[str, Any]) -> Tag:
        return self.render_text(ValueDetails.model_validate(details).value)

    def _render_url_details(self, details: Dict[str, Any]) -> Tag:
        return self.render_text_url(str(ValueDetails.model_validate(details).value))

    def _render_thumbnail_details(self, details: Dict[str, Any]) -> Tag:
        return self._render_thumbnail(str(ValueDetails.model_validate(details).value))

    def _render_numeric_details(self, details: Dict[str, Any]) -> Tag:
        model = ValueDetails.model_validate(details)
        return self._render_numeric(format_number(float(model.value), model.granularity or 0.1))

    def _render_bytes_details(self, details: Dict[str, Any]) -> Tag:
        model = ValueDetails.model_validate(details)
        return self._render_bytes(float(model.value), model.granularity)

    def _render_ms_details(self, details: Dict[str, Any]) -> Tag:
        model = ValueDetails.model_validate(details)
        return self._render_milliseconds(float(model.value), model.granularity, model.display_unit)

    def _render_node_details(self, details: Dict[str, Any]) -> Tag:
        model = NodeDetails.model_validate(details)
        return self.render_node(model.path, model.selector, model.snippet)

    def _render_link_details(self, details: Dict[str, Any]) -> Tag:
        model = LinkDetails.model_validate(details)
        return self.render_link(model.text, model.url)

    def _render_code_details(self, details: Dict[str, Any]) -> Tag:
        return self.render_code(CodeDetails.model_validate(details).value)

    # -- composite values ---------------------------------------------------

    def _render_list(self, details: Dict[str, Any]) -> Tag:
        model = ListDetails.model_validate(details)
        element = self._dom.create_element("div", "lh-list")
        for item in model.items:
            element.append(self.render(item))
        return element

    def _render_filmstrip(self, details: Dict[str, Any]) -> Tag:
        model = FilmstripDetails.model_validate(details)
        filmstrip = self._dom.create_element("div", "lh-filmstrip")
        for frame in model.items:
            frame_el = self._dom.create_child_of(filmstrip, "div", "lh-filmstrip__frame")
            self._dom.create_child_of(frame_el, "img", "lh-filmstrip__thumbnail", {
                "src": f"data:image/jpeg;base64,{frame.data}",
                "alt": "Screenshot",
            })
            frame_el["data-timing"] = format_milliseconds(frame.timing)
        return filmstrip

    def _render_crc(self, details: Dict[str, Any]) -> Tag:
        model = CriticalRequestChainDetails.model_validate(details)
        return CriticalRequestChainRenderer.render(self._dom, self._template_context, model, self)

    def _render_table(self, details: Dict[str, Any]) -> Tag:
        model = TableDetails.model_validate(details)
        return self._render_rows(model.headings, model.items)

    def _render_opportunity_table(self, details: Dict[str, Any]) -> Tag:
        model = OpportunityDetails.model_validate(details)
        return self._render_rows(model.headings, model.items)

    def _render_rows(self, headings, items) -> Tag:
        if not items:
            return self._dom.create_element("span")
        table = self._dom.create_element("table", "lh-table")
        head_row = self._dom.create_child_of(self._dom.create_child_of(table, "thead"), "tr")
        for heading in headings:
            label = self._dom.create_element("div", "lh-text")
            self._dom.set_text_safe(label, heading.title)
            cell = self._dom.create_child_of(head_row, "th", f"lh-table-column--{heading.column_type}")
            cell.append(label)
        body = self._dom.create_child_of(table, "tbody")
        for item in items:
            row = self._dom.create_child_of(body, "tr")
            for heading in headings:
                value_el = self._render_table_value(item.get(heading.key), heading)
                if value_el is None:
                    self._dom.create_child_of(row, "td", "lh-table-column--empty")
                else:
                    cell = self._dom.create_child_of(row, "td", f"lh-table-column--{heading.column_type}")
                    cell.append(value_el)
        return table

    def _render_table_value(self, value: Any, heading: TableHeading) -> Optional[Tag]:
        if value is None:
            return None
        if isinstance(value, dict):
            # Typed values carry their own tag and override the column type.
            value_type = value.get("type")
            if value_type == "code":
                return self.render_code(value.get("value", ""))
            if value_type == "link":
                return self._render_link_details(value)
            if value_type == "node":
                return self._render_node_details(value)
            if value_type == "url":
                return self.render_text_url(str(value.get("value", "")))
            debug("details", f"unknown table value type: {value_type!r}")
            return None

        column_type = heading.column_type
        if column_type == "bytes":
            return self._render_bytes(float(value), heading.granularity)
        if column_type == "ms":
            return self._render_milliseconds(float(value), heading.granularity, heading.display_unit)
        if column_type == "timespanMs":
            return self._render_milliseconds(float(value), None, None)
        if column_type == "numeric":
            if isinstance(value, (int, float)):
                return self._render_numeric(format_number(value, heading.granularity or 0.1))
            return self._render_numeric(str(value))
        if column_type == "code":
            return self.render_code(str(value))
        if column_type == "thumbnail":
            return self._render_thumbnail(str(value))
        if column_type == "url":
            text = str(value)
            if text.startswith(_URL_PREFIXES):
                return self.render_text_url(text)
            return self.render_code(text)
        if column_type == "text":
            return self.render_text(str(value))
        debug("details", f"unknown column type: {column_type!r}")
        return None
