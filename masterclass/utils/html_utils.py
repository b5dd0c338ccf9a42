"""Utilities for preparing HTML snippets."""
from html import escape
from textwrap import dedent


def html_block(template: str) -> str:
    """
    Normalize multi-line HTML built from indented triple-quoted strings.

    Markdown renderers (Streamlit, some mail clients' previews) treat lines
    with >=4 leading spaces as code blocks. We dedent and strip leading
    whitespace on each line to avoid that while keeping the markup intact.
    """
    lines = dedent(template).splitlines()
    return "\n".join(line.lstrip() for line in lines).strip()


def text(value: str) -> str:
    """Escape user-supplied text for inclusion in HTML."""
    return escape(value or "", quote=True)
