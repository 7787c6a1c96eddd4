"""Jinja2-rendered fragments embedded as raw nodes."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from jinja2 import BaseLoader, Environment, FileSystemLoader, StrictUndefined, select_autoescape

from .nodes import Raw


def fragment_env(loader: Optional[BaseLoader] = None) -> Environment:
    """Create an autoescaping environment where missing variables fail loudly."""

    return Environment(
        loader=loader,
        autoescape=select_autoescape(["html", "jinja"], default_for_string=True),
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=StrictUndefined,
    )


def template_fragment(source: str, **variables: Any) -> Raw:
    """Render an inline template string and embed the result verbatim."""

    template = fragment_env().from_string(source)
    return Raw(template.render(**variables))


@dataclass
class TemplateLibrary:
    """Named fragments loaded from a template directory."""

    directory: Path
    _env: Optional[Environment] = field(default=None, init=False, repr=False)

    @property
    def env(self) -> Environment:
        if self._env is None:
            self._env = fragment_env(FileSystemLoader([str(self.directory)]))
        return self._env

    def fragment(self, name: str, **variables: Any) -> Raw:
        return Raw(self.env.get_template(name).render(**variables))


__all__ = ["TemplateLibrary", "fragment_env", "template_fragment"]
