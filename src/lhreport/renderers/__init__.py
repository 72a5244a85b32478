"""
Renderers consume an audit Result and build the report DOM; run_all writes the
requested output formats to output_dir.
"""

from pathlib import Path
from typing import Iterable, Optional

from bs4 import BeautifulSoup
from jinja2 import Environment, FileSystemLoader
from markupsafe import Markup

from .._util import debug
from ..dom import DOM
from ..schema import Result
from .category import CategoryRenderer
from .details import DetailsRenderer
from .performance_category import PerformanceCategoryRenderer
from .report import ReportRenderer
from .ui_features import ReportUIFeatures

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
TEMPLATE_DOCUMENT = TEMPLATES_DIR / "templates.html"

OUTPUT_FORMATS = ("html", "json")


def load_template_document(path: Optional[Path] = None) -> BeautifulSoup:
    """Parse the document holding the report's <template> elements."""
    path = Path(path) if path is not None else TEMPLATE_DOCUMENT
    debug("renderers", f"loading templates from {path}")
    return BeautifulSoup(path.read_text(encoding="utf-8"), "html.parser")


def create_report_renderer(document: BeautifulSoup, theme: str = "light") -> ReportRenderer:
    """Wire the default renderer graph over one template document."""
    dom = DOM(document)
    details_renderer = DetailsRenderer(dom)
    return ReportRenderer(
        dom,
        CategoryRenderer(dom, details_renderer),
        PerformanceCategoryRenderer(dom, details_renderer),
        ReportUIFeatures(dom, theme),
    )


def render_html(result: Result, template_path: Optional[Path] = None, theme: str = "light") -> str:
    """Render `result` as a standalone HTML page."""
    document = load_template_document(template_path)
    renderer = create_report_renderer(document, theme)
    container = document.body if document.body is not None else document
    root = renderer.render_report(result, container)

    env = Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=True,
    )
    template = env.get_template("report.html.j2")
    return template.render(
        title=f"Lighthouse Report: {result.final_url}",
        theme=theme,
        report_html=Markup(str(root)),
    )


def run_all(
    result: Result,
    output_dir: Path,
    formats: Iterable[str] = ("html",),
    theme: str = "light",
    template_path: Optional[Path] = None,
) -> None:
    """Write report.html and/or report.json. output_dir is created if it does not exist."""
    formats = list(formats)
    unknown = [f for f in formats if f not in OUTPUT_FORMATS]
    if unknown:
        raise ValueError(f"unknown output format(s): {', '.join(unknown)}")

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    if "html" in formats:
        (output_dir / "report.html").write_text(render_html(result, template_path, theme), encoding="utf-8")
    if "json" in formats:
        (output_dir / "report.json").write_text(result.model_dump_json(by_alias=True, indent=2), encoding="utf-8")
