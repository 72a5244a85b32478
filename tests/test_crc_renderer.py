"""Tests for the critical request chain tree."""

import json
from pathlib import Path

import pytest

from lhreport.dom import DOM
from lhreport.format import NBSP
from lhreport.renderers import load_template_document
from lhreport.renderers.crc_details import CriticalRequestChainRenderer
from lhreport.renderers.details import DetailsRenderer
from lhreport.schema import CriticalRequestChainDetails

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def crc_details():
    raw = json.loads((FIXTURES / "sample_result.json").read_text())
    perf = raw["reportCategories"][0]
    return next(a for a in perf["audits"] if a["id"] == "critical-request-chains")["details"]


@pytest.fixture
def details_renderer():
    return DetailsRenderer(DOM(load_template_document()))


def test_crc_renders_through_details_renderer(details_renderer, crc_details):
    fragment = details_renderer.render(crc_details)
    container = fragment.select_one(".lh-crc-container")
    assert container is not None
    assert "lh-details" in container["class"]
    assert container.select_one(".crc-initial-nav").get_text() == "Initial Navigation"
    assert container.select_one(".lh-crc__longest_duration").get_text() == f"1,650{NBSP}ms"


def test_crc_nodes_in_tree_order(details_renderer, crc_details):
    fragment = details_renderer.render(crc_details)
    nodes = fragment.select(".crc-node")
    assert [n["title"] for n in nodes] == [
        "https://www.example.com/welcome?lang=en",
        "https://www.example.com/css/main.css",
        "https://fonts.example.net/font.css?family=Roboto",
    ]


def test_crc_tree_markers(details_renderer, crc_details):
    nodes = details_renderer.render(crc_details).select(".crc-node")

    def markers(node):
        return [" ".join(m["class"]) for m in node.select(".crc-node__tree-marker > span")]

    assert markers(nodes[0]) == ["tree-marker up-right", "tree-marker right", "tree-marker horiz-down"]
    assert markers(nodes[1]) == [
        "tree-marker", "tree-marker", "tree-marker vert-right", "tree-marker right", "tree-marker right",
    ]
    assert markers(nodes[2]) == [
        "tree-marker", "tree-marker", "tree-marker up-right", "tree-marker right", "tree-marker right",
    ]


def test_crc_leaf_nodes_show_duration_and_size(details_renderer, crc_details):
    nodes = details_renderer.render(crc_details).select(".crc-node")
    assert nodes[0].select(".crc-node__chain-duration") == []
    durations = [d.get_text() for d in nodes[1].select(".crc-node__chain-duration")]
    assert durations == [f" - 600{NBSP}ms, ", f"2.00{NBSP}KB"]


def test_create_segment_accumulates_transfer_size(crc_details):
    details = CriticalRequestChainDetails.model_validate(crc_details)
    root = CriticalRequestChainRenderer.create_segment(details.chains, "root", 1.0, 0)
    assert root.is_last_child
    assert root.has_children
    assert root.transfer_size == 4096

    child = CriticalRequestChainRenderer.create_segment(
        root.node.children, "css", root.start_time, root.transfer_size, root.tree_markers, root.is_last_child)
    assert not child.is_last_child
    assert not child.has_children
    assert child.transfer_size == 4096 + 2048
    assert child.tree_markers == [False]


def test_crc_url_text_is_escaped(details_renderer):
    fragment = details_renderer.render({
        "type": "criticalrequestchain",
        "longestChain": {"duration": 10},
        "chains": {
            "a": {"request": {"url": "https://example.com/<script>x</script>", "startTime": 0, "endTime": 0.01}},
        },
    })
    assert fragment.find("script") is None
    assert "<script>" in fragment.select_one(".crc-node")["title"]
