"""Tests for the BeautifulSoup-backed DOM adapter."""

import pytest
from bs4 import BeautifulSoup

from lhreport.dom import DOM
from lhreport.errors import ElementNotFound, TemplateNotFound

TEMPLATES = """
<html><head>
<template id="tmpl-card"><div class="card"><span class="card__title"></span></div></template>
</head><body></body></html>
"""


@pytest.fixture
def dom():
    return DOM(BeautifulSoup(TEMPLATES, "html.parser"))


def test_create_element_with_classes_and_attrs(dom):
    el = dom.create_element("a", "one two", {"href": "#x"})
    assert el.name == "a"
    assert el["class"] == ["one", "two"]
    assert el["href"] == "#x"


def test_create_child_of_appends(dom):
    parent = dom.create_element("div")
    child = dom.create_child_of(parent, "span", "kid")
    assert child.parent is parent
    assert parent.select_one(".kid") is child


def test_clone_template_returns_fresh_copy(dom):
    first = dom.clone_template("#tmpl-card")
    second = dom.clone_template("#tmpl-card")
    dom.set_text_safe(first.select_one(".card__title"), "changed")
    assert second.select_one(".card__title").get_text() == ""
    template = dom.document().select_one("#tmpl-card")
    assert template.select_one(".card__title").get_text() == ""


def test_clone_template_missing_raises(dom):
    with pytest.raises(TemplateNotFound) as exc:
        dom.clone_template("#tmpl-nope")
    assert "#tmpl-nope" in str(exc.value)


def test_clone_template_uses_given_context(dom):
    other = BeautifulSoup('<template id="tmpl-card"><p class="alt"></p></template>', "html.parser")
    fragment = dom.clone_template("#tmpl-card", other)
    assert fragment.select_one(".alt") is not None
    assert fragment.select_one(".card") is None


def test_find_and_query(dom):
    fragment = dom.clone_template("#tmpl-card")
    assert dom.find(".card__title", fragment).name == "span"
    assert dom.query(".missing", fragment) is None
    with pytest.raises(ElementNotFound):
        dom.find(".missing", fragment)


def test_find_and_query_default_to_host_document(dom):
    template = dom.find("#tmpl-card")
    assert template is dom.document().select_one("#tmpl-card")
    assert dom.query("head") is dom.document().head
    assert dom.query(".missing") is None
    with pytest.raises(ElementNotFound):
        dom.find(".missing")


def test_set_text_safe_does_not_parse_markup(dom):
    el = dom.create_element("div")
    dom.create_child_of(el, "b")
    dom.set_text_safe(el, "<script>alert(1)</script>")
    assert el.find("script") is None
    assert el.find("b") is None
    assert "&lt;script&gt;" in str(el)


def test_add_class_is_idempotent(dom):
    el = dom.create_element("div", "a")
    dom.add_class(el, "b", "a", "b")
    assert el["class"] == ["a", "b"]
    assert dom.has_class(el, "b")
    assert not dom.has_class(el, "c")


def test_markdown_links_become_anchors(dom):
    fragment = dom.convert_markdown_link_snippets("See [the docs](https://example.com/docs) for more.")
    link = fragment.find("a")
    assert link["href"] == "https://example.com/docs"
    assert link["rel"] == ["noopener"]
    assert link["target"] == "_blank"
    assert link.get_text() == "the docs"
    assert fragment.get_text() == "See the docs for more."


def test_markdown_links_with_other_protocols_stay_text(dom):
    fragment = dom.convert_markdown_link_snippets("Click [me](javascript:alert(1)) now")
    assert fragment.find("a") is None
    assert "me" in fragment.get_text()


def test_markdown_link_label_is_escaped(dom):
    fragment = dom.convert_markdown_link_snippets("[<img src=x>](https://example.com)")
    assert fragment.find("img") is None
    assert fragment.find("a").get_text() == "<img src=x>"


def test_markdown_code_snippets(dom):
    fragment = dom.convert_markdown_code_snippets("Has a `<title>` element")
    code = fragment.find("code")
    assert code.get_text() == "<title>"
    assert fragment.find("title") is None
    assert fragment.get_text() == "Has a <title> element"


def test_fragment_append_moves_children(dom):
    fragment = dom.convert_markdown_code_snippets("a `b` c")
    parent = dom.create_element("div")
    parent.append(fragment)
    assert parent.find("code").get_text() == "b"
    assert parent.get_text() == "a b c"
