"""Text templates for tag names, release titles and changelog markers.

Templates use ``{{name}}`` placeholders. Rendering is strict: a placeholder
that is not a field of TemplateContext is an error rather than an empty
string.
"""

from __future__ import annotations

import re

from pydantic import BaseModel

from .errors import TemplateError

_PLACEHOLDER_RE = re.compile(r"\{\{\s*([A-Za-z_][A-Za-z0-9_]*)\s*\}\}")


class TemplateContext(BaseModel):
    root_crate: str
    version: str
    changelog: str | None = None


class TextTemplate:
    def __init__(self, source: str) -> None:
        leftover = _PLACEHOLDER_RE.sub("", source)
        if "{{" in leftover or "}}" in leftover:
            raise TemplateError(f"Invalid template: {source}")
        self.source = source

    def placeholders(self) -> list[str]:
        return _PLACEHOLDER_RE.findall(self.source)

    def render(self, context: TemplateContext) -> str:
        values = context.model_dump()

        def substitute(m: re.Match[str]) -> str:
            name = m.group(1)
            if name not in values:
                raise TemplateError(
                    f"Failed to render template {self.source!r}: "
                    f"variable {name!r} not found"
                )
            value = values[name]
            return "" if value is None else str(value)

        return _PLACEHOLDER_RE.sub(substitute, self.source)

    def __repr__(self) -> str:
        return f"TextTemplate({self.source!r})"


def render(source: str, context: TemplateContext) -> str:
    return TextTemplate(source).render(context)
