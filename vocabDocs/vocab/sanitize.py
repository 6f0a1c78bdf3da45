from __future__ import annotations

"""Description clean-up: a plain-text form and a Markdown-friendly rich form."""

import re

from bs4 import BeautifulSoup

TERM_REF_RE = re.compile(r"\[\[([^\[\]]+)\]\]")
_MD_LINK_RE = re.compile(r"(?<!\[)\[([^\[\]]+)\]\(([^)\s]+)\)")
_BLOCK_TAGS = ("p", "div", "ul", "ol")


def term_refs(text: str) -> list[str]:
    """Names referenced with ``[[Term]]`` markers, in order of appearance."""

    seen: list[str] = []
    for match in TERM_REF_RE.finditer(text or ""):
        name = match.group(1).strip()
        if name and name not in seen:
            seen.append(name)
    return seen


def _flatten(text: str, *, rich: bool) -> str:
    """Render embedded HTML as text; ``rich`` keeps links, code and line breaks."""

    if "<" not in text and "&" not in text:
        return text
    soup = BeautifulSoup(text, "html.parser")
    for br in soup.find_all("br"):
        br.replace_with("\n" if rich else " ")
    for anchor in soup.find_all("a"):
        label = " ".join(anchor.get_text(" ").split())
        href = (anchor.get("href") or "").strip()
        anchor.replace_with(f"[{label}]({href})" if rich and label and href else label)
    for code in soup.find_all("code"):
        code.replace_with(f"`{code.get_text()}`" if rich else code.get_text())
    for item in soup.find_all("li"):
        item.insert_before("\n- " if rich else " ")
    for block in soup.find_all(_BLOCK_TAGS):
        block.insert_after("\n\n" if rich else " ")
    return soup.get_text()


def plain_text(value: str | None) -> str:
    """Strip markup and link syntax, collapsing whitespace to single spaces."""

    text = _flatten(str(value or ""), rich=False)
    text = TERM_REF_RE.sub(lambda m: m.group(1).strip(), text)
    text = _MD_LINK_RE.sub(lambda m: m.group(1), text)
    return " ".join(text.split())


def rich_text(value: str | None) -> str:
    """Convert embedded HTML to Markdown, keeping ``[[Term]]`` markers intact."""

    text = str(value or "").replace("\r\n", "\n").replace("\r", "\n")
    text = _flatten(text, rich=True)
    cleaned = "\n".join(line.rstrip() for line in text.split("\n")).strip()
    return re.sub(r"\n{3,}", "\n\n", cleaned)


def sanitize_description(value: str | None) -> tuple[str, str]:
    """Return ``(plain, rich)`` variants of a raw description."""

    return plain_text(value), rich_text(value)


__all__ = ["TERM_REF_RE", "term_refs", "plain_text", "rich_text", "sanitize_description"]
