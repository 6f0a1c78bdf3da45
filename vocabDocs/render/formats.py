from __future__ import annotations

"""Output profiles: serialize a :class:`Document` as MDX, Markdown, JSON or HTML."""

import html
import json
import re
from dataclasses import asdict
from typing import Any, Callable, Mapping, Sequence

import yaml

from vocabDocs.render.document import (
    BREADCRUMB,
    CODE,
    DESCRIPTION,
    LINK_LIST,
    PROPERTY_TABLE,
    Document,
    Link,
    Section,
    href,
)
from vocabDocs.vocab.sanitize import TERM_REF_RE

NEW_MARKER = " \U0001f195"
ARROW = " → "
_MD_LINK_RE = re.compile(r"\[([^\[\]]+)\]\(([^)\s]+)\)")


def _identity(text: str) -> str:
    return text


def _escape_mdx(text: str) -> str:
    return text.replace("{", "\\{").replace("}", "\\}").replace("<", "&lt;")


def _cell(text: str) -> str:
    return text.replace("|", "\\|")


def frontmatter_block(fields: Mapping[str, Any]) -> str:
    """YAML frontmatter with key order preserved."""

    dumped = yaml.safe_dump(
        dict(fields),
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
        width=10**6,
    )
    return f"---\n{dumped}---\n"


# Markdown ---------------------------------------------------------------------
class _MarkdownWriter:
    def __init__(self, doc: Document, ext: str, escape: Callable[[str], str]) -> None:
        self.doc = doc
        self.ext = ext
        self.escape = escape

    def link(self, target: Link, *, marker: bool = False) -> str:
        if not target.resolved:
            return target.name
        text = f"[{target.name}]({href(target, from_kind=self.doc.kind, ext=self.ext)})"
        if marker and target.extension:
            text += NEW_MARKER
        return text

    def text_with_terms(self, section: Section) -> str:
        by_name = {link.name: link for link in section.links}
        out = []
        # split() alternates plain text with the captured [[Term]] names
        for idx, piece in enumerate(TERM_REF_RE.split(section.text)):
            if idx % 2:
                target = by_name.get(piece.strip())
                out.append(self.link(target) if target is not None else self.escape(piece.strip()))
            else:
                out.append(self.escape(piece))
        return "".join(out)

    def table(self, section: Section) -> list[str]:
        lines = [
            "| Property | Expected Type | Description |",
            "|----------|---------------|-------------|",
        ]
        for row in section.rows:
            types = ", ".join(self.link(r) for r in row.ranges) or "Any"
            marker = NEW_MARKER if row.property.extension else ""
            lines.append(
                f"| {self.link(row.property)}{marker} | {types} | {_cell(self.escape(row.summary))} |"
            )
        return lines

    def render(self) -> str:
        lines: list[str] = []
        in_inherited = False
        for section in self.doc.sections:
            if section.kind == BREADCRUMB:
                crumbs = [self.link(link) for link in section.links]
                crumbs.append(f"**{section.text}**")
                lines += [ARROW.join(crumbs), ""]
            elif section.kind == DESCRIPTION:
                lines += [f"# {section.title}", ""]
                if section.text:
                    lines += [self.text_with_terms(section), ""]
            elif section.kind == PROPERTY_TABLE:
                if section.origin is not None:
                    if not in_inherited:
                        lines += [f"## {section.title}", ""]
                        in_inherited = True
                    lines += [f"### From {self.link(section.origin)}", ""]
                else:
                    lines += [f"## {section.title}", ""]
                lines += self.table(section) + [""]
            elif section.kind == LINK_LIST:
                lines += [f"## {section.title}", ""]
                if section.text:
                    lines += [section.text, ""]
                lines += [f"- {self.link(link, marker=True)}" for link in section.links]
                if section.more:
                    lines.append(f"- ... and {section.more} more")
                lines.append("")
            elif section.kind == CODE:
                lines += [f"## {section.title}", "", f"```{section.language or ''}", section.text, "```", ""]
        return "\n".join(lines)


def to_markdown(doc: Document, **_: Any) -> str:
    """Body content only; links point at sibling ``.md`` files."""

    return _MarkdownWriter(doc, "md", _identity).render()


def to_mdx(doc: Document, **_: Any) -> str:
    body = _MarkdownWriter(doc, "mdx", _escape_mdx).render()
    return frontmatter_block(doc.frontmatter) + "\n" + body


# JSON -------------------------------------------------------------------------
def _compact(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _compact(v) for k, v in value.items() if v not in (None, "", (), [], 0)}
    if isinstance(value, (list, tuple)):
        return [_compact(v) for v in value]
    return value


def to_structured(doc: Document) -> dict[str, Any]:
    return {
        "kind": doc.kind,
        "name": doc.name,
        "slug": doc.slug,
        "frontmatter": dict(doc.frontmatter),
        "sections": [_compact(asdict(section)) for section in doc.sections],
        "warnings": [str(w) for w in doc.warnings],
    }


def to_json(doc: Document, **_: Any) -> str:
    return json.dumps(to_structured(doc), indent=2, ensure_ascii=False) + "\n"


# HTML -------------------------------------------------------------------------
def _html_link(doc: Document, target: Link, *, marker: bool = False) -> str:
    label = html.escape(target.name)
    if not target.resolved:
        return f'<span class="unresolved">{label}</span>'
    out = f'<a href="{html.escape(href(target, from_kind=doc.kind, ext="html"))}">{label}</a>'
    if marker and target.extension:
        out += NEW_MARKER
    return out


def _html_text(doc: Document, section: Section) -> str:
    by_name = {link.name: link for link in section.links}
    paragraphs = []
    for block in section.text.split("\n\n"):
        escaped = html.escape(block)
        escaped = _MD_LINK_RE.sub(lambda m: f'<a href="{m.group(2)}">{m.group(1)}</a>', escaped)

        def replace(match: re.Match[str]) -> str:
            name = html.unescape(match.group(1)).strip()
            target = by_name.get(name)
            return _html_link(doc, target) if target else html.escape(name)

        escaped = TERM_REF_RE.sub(replace, escaped).replace("\n", "<br>\n")
        paragraphs.append(f"<p>{escaped}</p>")
    return "\n".join(paragraphs)


def _sidebar(nodes: Sequence[Mapping[str, Any]], current: str) -> str:
    items = []
    for node in nodes:
        name = html.escape(str(node["name"]))
        label = f"<strong>{name}</strong>" if node["name"] == current else (
            f'<a href="../{html.escape(str(node["slug"]))}.html">{name}</a>'
        )
        children = node.get("children") or []
        if children and node.get("expanded"):
            items.append(f"<li>{label}\n{_sidebar(children, current)}</li>")
        elif children:
            items.append(f'<li class="collapsed">{label}</li>')
        else:
            items.append(f"<li>{label}</li>")
    return "<ul>\n" + "\n".join(items) + "\n</ul>"


def to_html(doc: Document, *, navigation: Sequence[Mapping[str, Any]] | None = None, **_: Any) -> str:
    """Standalone page; ``navigation`` is a tree already expanded for ``doc``."""

    body: list[str] = []
    in_inherited = False
    for section in doc.sections:
        if section.kind == BREADCRUMB:
            crumbs = [_html_link(doc, link) for link in section.links]
            crumbs.append(f"<strong>{html.escape(section.text)}</strong>")
            body.append(f'<nav class="breadcrumb">{ARROW.join(crumbs)}</nav>')
        elif section.kind == DESCRIPTION:
            body.append(f"<h1>{html.escape(section.title or doc.name)}</h1>")
            if section.text:
                body.append(_html_text(doc, section))
        elif section.kind == PROPERTY_TABLE:
            if section.origin is not None:
                if not in_inherited:
                    body.append(f"<h2>{html.escape(section.title or '')}</h2>")
                    in_inherited = True
                body.append(f"<h3>From {_html_link(doc, section.origin)}</h3>")
            else:
                body.append(f"<h2>{html.escape(section.title or '')}</h2>")
            rows = []
            for row in section.rows:
                types = ", ".join(_html_link(doc, r) for r in row.ranges) or "Any"
                marker = NEW_MARKER if row.property.extension else ""
                rows.append(
                    f"<tr><td>{_html_link(doc, row.property)}{marker}</td>"
                    f"<td>{types}</td><td>{html.escape(row.summary)}</td></tr>"
                )
            body.append(
                "<table>\n<tr><th>Property</th><th>Expected Type</th><th>Description</th></tr>\n"
                + "\n".join(rows)
                + "\n</table>"
            )
        elif section.kind == LINK_LIST:
            body.append(f"<h2>{html.escape(section.title or '')}</h2>")
            if section.text:
                body.append(f"<p>{html.escape(section.text)}</p>")
            items = [f"<li>{_html_link(doc, link, marker=True)}</li>" for link in section.links]
            if section.more:
                items.append(f"<li>... and {section.more} more</li>")
            body.append("<ul>\n" + "\n".join(items) + "\n</ul>")
        elif section.kind == CODE:
            body.append(f"<h2>{html.escape(section.title or '')}</h2>")
            body.append(
                f'<pre><code class="language-{section.language or "text"}">'
                f"{html.escape(section.text)}</code></pre>"
            )

    sidebar = f'<aside class="sidebar">\n{_sidebar(navigation, doc.name)}\n</aside>\n' if navigation else ""
    description = html.escape(str(doc.frontmatter.get("description", "")), quote=True)
    return (
        "<!DOCTYPE html>\n"
        '<html lang="en">\n<head>\n<meta charset="UTF-8">\n'
        f"<title>{html.escape(doc.name)}</title>\n"
        f'<meta name="description" content="{description}">\n'
        "</head>\n<body>\n"
        f"{sidebar}"
        '<main class="content">\n'
        + "\n".join(body)
        + "\n</main>\n</body>\n</html>\n"
    )


PROFILES: dict[str, tuple[str, Callable[..., str]]] = {
    "mdx": ("mdx", to_mdx),
    "markdown": ("md", to_markdown),
    "json": ("json", to_json),
    "html": ("html", to_html),
}


def serialize(doc: Document, profile: str, **options: Any) -> tuple[str, str]:
    """Return ``(extension, text)`` for ``doc`` under ``profile``."""

    try:
        ext, fn = PROFILES[profile]
    except KeyError:
        raise ValueError(f"Unknown output profile '{profile}'") from None
    return ext, fn(doc, **options)


__all__ = [
    "PROFILES",
    "NEW_MARKER",
    "frontmatter_block",
    "serialize",
    "to_html",
    "to_json",
    "to_markdown",
    "to_mdx",
    "to_structured",
]
