"""Critical request chain visualiser: a tree of requests with timing and size."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from bs4 import Tag

from ..dom import DOM
from ..format import UI_STRINGS, format_bytes_to_kb, format_milliseconds
from ..schema import CrcNode, CriticalRequestChainDetails


@dataclass
class _Segment:
    node: CrcNode
    is_last_child: bool
    has_children: bool
    start_time: float
    transfer_size: float
    tree_markers: List[bool] = field(default_factory=list)


class CriticalRequestChainRenderer:
    @staticmethod
    def create_segment(
        parent: Dict[str, CrcNode],
        key: str,
        start_time: float,
        transfer_size: float,
        tree_markers: Optional[List[bool]] = None,
        parent_is_last_child: Optional[bool] = None,
    ) -> _Segment:
        node = parent[key]
        siblings = list(parent)
        markers = list(tree_markers or [])
        if parent_is_last_child is not None:
            markers.append(not parent_is_last_child)
        return _Segment(
            node=node,
            is_last_child=siblings.index(key) == len(siblings) - 1,
            has_children=bool(node.children),
            start_time=start_time,
            transfer_size=transfer_size + node.request.transfer_size,
            tree_markers=markers,
        )

    @staticmethod
    def create_chain_node(dom: DOM, template_context, segment: _Segment, details_renderer) -> Tag:
        fragment = dom.clone_template("#tmpl-lh-crc__chains", template_context)
        node_el = dom.find(".crc-node", fragment)
        request = segment.node.request
        node_el["title"] = request.url

        marker_el = dom.find(".crc-node__tree-marker", fragment)
        for has_sibling_below in segment.tree_markers:
            dom.create_child_of(marker_el, "span", "tree-marker vert" if has_sibling_below else "tree-marker")
            dom.create_child_of(marker_el, "span", "tree-marker")
        if segment.is_last_child:
            dom.create_child_of(marker_el, "span", "tree-marker up-right")
        else:
            dom.create_child_of(marker_el, "span", "tree-marker vert-right")
        dom.create_child_of(marker_el, "span", "tree-marker right")
        dom.create_child_of(marker_el, "span", "tree-marker horiz-down" if segment.has_children else "tree-marker right")

        value_el = dom.find(".crc-node__tree-value", fragment)
        value_el.append(details_renderer.render_text_url(request.url))
        if not segment.has_children:
            duration = dom.create_child_of(value_el, "span", "crc-node__chain-duration")
            dom.set_text_safe(
                duration,
                " - " + format_milliseconds((request.end_time - request.start_time) * 1000, 1) + ", ",
            )
            size = dom.create_child_of(value_el, "span", "crc-node__chain-duration")
            dom.set_text_safe(size, format_bytes_to_kb(request.transfer_size, 0.01))
        return node_el.extract()

    @classmethod
    def build_tree(cls, dom: DOM, template_context, segment: _Segment, container: Tag, details_renderer) -> None:
        container.append(cls.create_chain_node(dom, template_context, segment, details_renderer))
        for key in segment.node.children:
            child = cls.create_segment(
                segment.node.children,
                key,
                segment.start_time,
                segment.transfer_size,
                segment.tree_markers,
                segment.is_last_child,
            )
            cls.build_tree(dom, template_context, child, container, details_renderer)

    @classmethod
    def render(cls, dom: DOM, template_context, details: CriticalRequestChainDetails, details_renderer) -> Tag:
        fragment = dom.clone_template("#tmpl-lh-crc", template_context)
        chains_el = dom.find(".lh-crc", fragment)

        dom.set_text_safe(dom.find(".crc-initial-nav", fragment), UI_STRINGS["crcInitialNavigation"])
        dom.set_text_safe(dom.find(".lh-crc__longest_duration_label", fragment), UI_STRINGS["crcLongestDurationLabel"])
        dom.set_text_safe(
            dom.find(".lh-crc__longest_duration", fragment),
            format_milliseconds(details.longest_chain.duration, 1),
        )

        start_time = 0.0
        if details.chains:
            start_time = next(iter(details.chains.values())).request.start_time
        for key in details.chains:
            segment = cls.create_segment(details.chains, key, start_time, 0)
            cls.build_tree(dom, template_context, segment, chains_el, details_renderer)
        return dom.find(".lh-crc-container", fragment).extract()
