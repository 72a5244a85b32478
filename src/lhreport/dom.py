"""
Structured-document adapter over BeautifulSoup.

Every renderer builds markup through one DOM instance. Templates are looked
up in a template context (a parsed document holding <template> elements) and
cloned into fresh fragments. A fragment is a detached BeautifulSoup tree:
appending it to a tag moves its children into that tag.
"""

import re
from typing import Dict, Optional, Union

from bs4 import BeautifulSoup, NavigableString, Tag

from .errors import ElementNotFound, TemplateNotFound

Node = Union[Tag, BeautifulSoup]

_PARSER = "html.parser"

# [text](url)
_MARKDOWN_LINK = re.compile(r"\[([^\]]*)\]\(([^)\s]*)\)")
_MARKDOWN_CODE = re.compile(r"`([^`]*)`")


class DOM:
    def __init__(self, document: BeautifulSoup):
        self._document = document

    def document(self) -> BeautifulSoup:
        """The host document; also the default template context."""
        return self._document

    def create_element(
        self,
        name: str,
        class_name: Optional[str] = None,
        attrs: Optional[Dict[str, str]] = None,
    ) -> Tag:
        element = self._document.new_tag(name, attrs=dict(attrs or {}))
        if class_name:
            element["class"] = class_name.split()
        return element

    def create_child_of(
        self,
        parent: Node,
        name: str,
        class_name: Optional[str] = None,
        attrs: Optional[Dict[str, str]] = None,
    ) -> Tag:
        element = self.create_element(name, class_name, attrs)
        parent.append(element)
        return element

    def create_fragment(self) -> BeautifulSoup:
        return BeautifulSoup("", _PARSER)

    def clone_template(self, selector: str, context: Optional[Node] = None) -> BeautifulSoup:
        """Clone the inner markup of the template matching `selector` into a new fragment."""
        source = self._document if context is None else context
        template = source.select_one(selector)
        if template is None:
            raise TemplateNotFound(selector)
        return BeautifulSoup(template.decode_contents(), _PARSER)

    def find(self, selector: str, root: Optional[Node] = None) -> Tag:
        """First match for `selector` under `root` (default: host document); raises ElementNotFound."""
        source = self._document if root is None else root
        element = source.select_one(selector)
        if element is None:
            raise ElementNotFound(selector)
        return element

    def query(self, selector: str, root: Optional[Node] = None) -> Optional[Tag]:
        """Like find(), for call sites where the element is optional."""
        source = self._document if root is None else root
        return source.select_one(selector)

    def set_text_safe(self, element: Tag, text: object) -> Tag:
        """Replace the element's children with one text node; never parsed as markup."""
        element.clear()
        element.append(NavigableString("" if text is None else str(text)))
        return element

    def add_class(self, element: Tag, *class_names: str) -> Tag:
        classes = list(element.get("class") or [])
        for name in class_names:
            if name and name not in classes:
                classes.append(name)
        element["class"] = classes
        return element

    def has_class(self, element: Tag, class_name: str) -> bool:
        return class_name in (element.get("class") or [])

    def convert_markdown_link_snippets(self, text: str) -> BeautifulSoup:
        """Turn ``[label](https://...)`` into anchors; everything else stays text.

        Links with a protocol other than http(s) are kept as their label only.
        """
        fragment = self.create_fragment()
        position = 0
        for match in _MARKDOWN_LINK.finditer(text or ""):
            if match.start() > position:
                fragment.append(NavigableString(text[position:match.start()]))
            label, url = match.group(1), match.group(2)
            if url.startswith(("http://", "https://")):
                link = self.create_element("a", attrs={"rel": "noopener", "target": "_blank", "href": url})
                self.set_text_safe(link, label)
                fragment.append(link)
            else:
                fragment.append(NavigableString(label))
            position = match.end()
        if position < len(text or ""):
            fragment.append(NavigableString(text[position:]))
        return fragment

    def convert_markdown_code_snippets(self, text: str) -> BeautifulSoup:
        """Turn backtick-quoted spans into <code> elements."""
        fragment = self.create_fragment()
        for index, piece in enumerate(_MARKDOWN_CODE.split(text or "")):
            if not piece:
                continue
            if index % 2:
                code = self.create_element("code")
                self.set_text_safe(code, piece)
                fragment.append(code)
            else:
                fragment.append(NavigableString(piece))
        return fragment
