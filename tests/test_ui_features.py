"""Tests for report UI features: theme, export menu, embedded JSON, group state."""

import json
from pathlib import Path

import pytest

from lhreport.dom import DOM
from lhreport.pipeline import load_result
from lhreport.renderers import create_report_renderer, load_template_document
from lhreport.renderers.ui_features import ReportUIFeatures
from lhreport.schema import Result

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def result():
    return load_result(FIXTURES / "sample_result.json")


def _render(result, theme="light"):
    document = load_template_document()
    return create_report_renderer(document, theme).render_report(result, document.body)


def test_light_theme_by_default(result):
    root = _render(result)
    assert "dark" not in root["class"]


def test_dark_theme_class(result):
    root = _render(result, theme="dark")
    assert "dark" in root["class"]


def test_unknown_theme_rejected():
    with pytest.raises(ValueError):
        ReportUIFeatures(DOM(load_template_document()), theme="neon")


def test_export_menu_aria(result):
    root = _render(result)
    button = root.select_one(".lh-export__button")
    assert button["aria-haspopup"] == "menu"
    assert button["aria-expanded"] == "false"
    dropdown = root.select_one(".lh-export__dropdown")
    assert dropdown["role"] == "menu"
    links = dropdown.select("a")
    assert links
    assert all(link["role"] == "menuitem" for link in links)


def test_embedded_result_json_round_trips(result):
    root = _render(result)
    script = root.select_one("script.lh-report-json")
    assert script["type"] == "application/json"
    embedded = Result.model_validate(json.loads(script.string))
    assert embedded.final_url == result.final_url
    assert len(embedded.report_categories) == len(result.report_categories)


def test_embedded_json_cannot_close_script(result):
    hostile = result.model_copy(update={"run_warnings": ["</script><script>alert(1)</script>"]})
    root = _render(hostile)
    html = str(root.select_one("script.lh-report-json"))
    assert html.count("</script>") == 1
    assert "\\u003c/script>" in html
    assert json.loads(root.select_one("script.lh-report-json").string)["runWarnings"] == hostile.run_warnings


def test_passed_clump_collapsed_other_groups_open(result):
    root = _render(result)
    passed = root.select_one(".lh-clump--passed")
    assert not passed.has_attr("open")
    for group in root.select("details.lh-audit-group"):
        if "lh-clump--passed" not in group["class"]:
            assert group.has_attr("open")
