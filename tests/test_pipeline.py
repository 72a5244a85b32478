"""
Tests for result load/save, run_all output files and the CLI entry point.
"""

import json
import tempfile
from pathlib import Path

import pytest
from bs4 import BeautifulSoup

from lhreport.__main__ import main
from lhreport.cli import parse_args
from lhreport.pipeline import load_result, save_result
from lhreport.renderers import TEMPLATE_DOCUMENT, render_html, run_all
from lhreport.schema import SCHEMA_VERSION

FIXTURES = Path(__file__).parent / "fixtures"
SAMPLE = FIXTURES / "sample_result.json"


def test_load_and_save_round_trip():
    result = load_result(SAMPLE)
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "nested" / "result.json"
        save_result(result, path)
        data = json.loads(path.read_text())
        assert "finalUrl" in data
        assert load_result(path) == result


def test_load_warns_on_newer_schema(capsys):
    data = json.loads(SAMPLE.read_text())
    data["schema_version"] = SCHEMA_VERSION + 1
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "result.json"
        path.write_text(json.dumps(data))
        result = load_result(path)
    assert result.final_url == data["finalUrl"]
    assert "newer lhreport" in capsys.readouterr().err


def test_load_rejects_non_object():
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "result.json"
        path.write_text("[1, 2, 3]")
        with pytest.raises(ValueError):
            load_result(path)


def test_render_html_is_standalone_page():
    html = render_html(load_result(SAMPLE))
    soup = BeautifulSoup(html, "html.parser")
    assert soup.title.get_text() == "Lighthouse Report: https://www.example.com/welcome?lang=en"
    assert soup.find("style") is not None
    assert len(soup.select("body > .lh-container")) == 1
    assert soup.find("template") is None
    assert len(soup.select(".lh-category")) == 3


def test_render_html_dark_theme():
    soup = BeautifulSoup(render_html(load_result(SAMPLE), theme="dark"), "html.parser")
    assert "dark" in soup.body["class"]
    assert "dark" in soup.select_one(".lh-container")["class"]


def test_run_all_writes_requested_formats():
    result = load_result(SAMPLE)
    with tempfile.TemporaryDirectory() as tmp:
        out = Path(tmp) / "out"
        run_all(result, out, formats=("html", "json"))
        assert (out / "report.html").stat().st_size > 0
        assert json.loads((out / "report.json").read_text())["finalUrl"] == result.final_url


def test_run_all_rejects_unknown_format():
    with tempfile.TemporaryDirectory() as tmp:
        with pytest.raises(ValueError):
            run_all(load_result(SAMPLE), Path(tmp), formats=("pdf",))


def test_parse_args_defaults():
    args = parse_args([str(SAMPLE)])
    assert args.result == SAMPLE
    assert args.output_dir == Path("./output")
    assert args.formats == ["html"]
    assert args.theme == "light"
    assert args.template_path is None


def test_parse_args_output_list():
    args = parse_args([str(SAMPLE), "--output", "html,json", "--theme", "dark", "-o", "/tmp/x"])
    assert args.formats == ["html", "json"]
    assert args.theme == "dark"
    assert args.output_dir == Path("/tmp/x")


def test_parse_args_rejects_bad_format():
    with pytest.raises(SystemExit):
        parse_args([str(SAMPLE), "--output", "html,pdf"])


def test_main_writes_report():
    with tempfile.TemporaryDirectory() as tmp:
        rc = main([str(SAMPLE), "-o", tmp, "--output", "html,json"])
        assert rc == 0
        assert (Path(tmp) / "report.html").exists()
        assert (Path(tmp) / "report.json").exists()


def test_main_custom_templates():
    with tempfile.TemporaryDirectory() as tmp:
        templates = Path(tmp) / "templates.html"
        original = TEMPLATE_DOCUMENT.read_text()
        templates.write_text(original.replace("lh-footer__text", "lh-footer__text custom-footer"))
        rc = main([str(SAMPLE), "-o", tmp, "--templates", str(templates)])
        assert rc == 0
        assert "custom-footer" in (Path(tmp) / "report.html").read_text()


def test_main_missing_file_returns_error(capsys):
    with tempfile.TemporaryDirectory() as tmp:
        rc = main([str(Path(tmp) / "nope.json"), "-o", tmp])
    assert rc == 1
    assert capsys.readouterr().err.startswith("Error:")


def test_main_missing_template_returns_error(capsys):
    with tempfile.TemporaryDirectory() as tmp:
        templates = Path(tmp) / "empty.html"
        templates.write_text("<html><body></body></html>")
        rc = main([str(SAMPLE), "-o", tmp, "--templates", str(templates)])
    assert rc == 1
    assert "Template not found: template#tmpl-lh-heading" in capsys.readouterr().err
