"""Render documents as Markdown with a YAML frontmatter block."""

from __future__ import annotations

import html
import logging
from typing import Callable, Dict, List, Mapping, Optional

from bs4 import BeautifulSoup

from .converters import HtmlConverter
from .converters.builtin.plaintext import extract_text
from .models import Document
from .urls import UrlConverter

logger = logging.getLogger(__name__)

FRONTMATTER_DELIMITER = "---"
LANGUAGE_PREFIXES = ("language-", "lang-")

# Frontmatter key -> taxonomy name, in output order.
DEFAULT_TAXONOMIES: Dict[str, str] = {"categories": "category", "tags": "post_tag"}

TaxonomiesHook = Callable[[Document, Mapping[str, str]], Mapping[str, str]]
FrontmatterLinesHook = Callable[[List[str], Document], List[str]]
ConversionFallback = Callable[[str, Document], str]
ConversionErrorHook = Callable[[Document, Exception], None]
FooterHook = Callable[[Document], str]


def yaml_quote(value: str) -> str:
    value = html.unescape(value)
    value = value.replace("\\", "\\\\")
    value = value.replace('"', '\\"')
    return f'"{value}"'


def plain_text_fallback(body_html: str, document: Document) -> str:
    return extract_text(body_html)


def taxonomy_footer(document: Document) -> str:
    """List category and tag names under a rule, after the body."""
    parts = []
    for label, taxonomy in (("Categories", "category"), ("Tags", "post_tag")):
        terms = document.terms.get(taxonomy) or []
        if terms:
            parts.append(f"**{label}:** " + ", ".join(term.name for term in terms))
    if not parts:
        return ""
    return "---\n\n" + "\n".join(parts)


def _language_hint(*nodes) -> Optional[str]:
    for node in nodes:
        if node is None:
            continue
        for css_class in node.get("class") or []:
            for prefix in LANGUAGE_PREFIXES:
                if css_class.startswith(prefix) and len(css_class) > len(prefix):
                    return css_class[len(prefix):]
    return None


def sanitize_code_blocks(body_html: str) -> str:
    """Flatten decorating markup inside ``<pre>`` and ``<code>``.

    Highlighter spans are reduced to their text and ``<br>`` becomes a
    newline. Every ``<pre>`` becomes ``<pre><code class="language-X">`` when
    a language hint is present on either element, plain ``<pre><code>``
    otherwise.
    """
    soup = BeautifulSoup(body_html, "html.parser")

    for pre in soup.find_all("pre"):
        language = _language_hint(pre.find("code"), pre)
        for line_break in pre.find_all("br"):
            line_break.replace_with("\n")
        text = pre.get_text()
        code = soup.new_tag("code")
        if language:
            code["class"] = f"language-{language}"
        code.string = text
        pre.clear()
        pre.attrs = {}
        pre.append(code)

    for code in soup.find_all("code"):
        if code.find_parent("pre") is None and code.find(True) is not None:
            code.string = code.get_text()

    return str(soup)


class MarkdownRenderer:
    def __init__(
        self,
        converter: HtmlConverter,
        urls: UrlConverter,
        *,
        taxonomies_hook: TaxonomiesHook | None = None,
        frontmatter_hook: FrontmatterLinesHook | None = None,
        fallback: ConversionFallback = plain_text_fallback,
        on_conversion_error: ConversionErrorHook | None = None,
        footer: FooterHook | None = None,
    ) -> None:
        self._converter = converter
        self._urls = urls
        self._taxonomies_hook = taxonomies_hook
        self._frontmatter_hook = frontmatter_hook
        self._fallback = fallback
        self._on_conversion_error = on_conversion_error
        self._footer = footer

    def render(self, document: Document) -> str:
        frontmatter = self.frontmatter(document)
        title = html.unescape(document.title)
        body = self.convert_body(document)

        output = f"{frontmatter}\n\n# {title}\n"
        if body:
            output += f"\n{body}\n"
        footer = self._footer(document) if self._footer is not None else ""
        if footer:
            output += f"\n{footer}\n"
        return output

    def taxonomies(self, document: Document) -> Mapping[str, str]:
        if self._taxonomies_hook is None:
            return DEFAULT_TAXONOMIES
        return self._taxonomies_hook(document, dict(DEFAULT_TAXONOMIES))

    def frontmatter(self, document: Document) -> str:
        lines = [FRONTMATTER_DELIMITER]
        lines.append(f"title: {yaml_quote(document.title)}")
        lines.append(f"date: {document.published_at:%Y-%m-%d}")
        lines.append(f"author: {yaml_quote(document.author)}")

        if document.featured_image:
            lines.append(f"featured_image: {yaml_quote(document.featured_image)}")

        for key, taxonomy in self.taxonomies(document).items():
            terms = document.terms.get(taxonomy) or []
            if not terms:
                continue
            lines.append(f"{key}:")
            for term in terms:
                lines.append(f"  - name: {yaml_quote(term.name)}")
                lines.append(f"    url: {yaml_quote(self._urls.to_markdown(term.url))}")

        lines.append(FRONTMATTER_DELIMITER)

        if self._frontmatter_hook is not None:
            lines = list(self._frontmatter_hook(lines, document))
        return "\n".join(lines)

    def convert_body(self, document: Document) -> str:
        try:
            markdown = self._converter.convert(sanitize_code_blocks(document.body_html))
        except Exception as exc:
            logger.warning(
                "HTML conversion failed for document %s, using plain text fallback",
                document.id,
                exc_info=exc,
            )
            if self._on_conversion_error is not None:
                self._on_conversion_error(document, exc)
            markdown = self._fallback(document.body_html, document)
        return markdown.strip()
