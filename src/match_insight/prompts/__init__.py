"""Prompt templates stored as Markdown files with YAML front matter and a Jinja2 body.

The front matter carries the template's identity (``id``, ``version``), the
``system_message`` sent alongside the rendered body, the list of context keys the
body ``requires`` and any other keys, which become default render variables.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from importlib import resources
from types import MappingProxyType
from typing import Any, Dict, Mapping, Tuple

import yaml
from jinja2 import Environment, StrictUndefined, Template

_JINJA_ENV = Environment(
    autoescape=False,
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=False,
    undefined=StrictUndefined,
)
_IDENTITY_KEYS = frozenset({"id", "version", "description", "notes", "requires", "system_message"})

_templates: Dict[str, "PromptTemplate"] = {}
_templates_lock = threading.Lock()


class MissingTemplateFieldsError(KeyError):
    """The render context lacks keys the template declares under ``requires``."""

    def __init__(self, template: str, missing: Tuple[str, ...]) -> None:
        super().__init__(f"Template '{template}' needs {', '.join(missing)}")
        self.template = template
        self.missing = missing


def _as_names(value: Any) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if isinstance(value, (list, tuple)):
        return tuple(str(item) for item in value)
    raise ValueError(f"'requires' must be a name or a list of names, got {type(value).__name__}")


@dataclass(frozen=True)
class PromptTemplate:
    """A compiled template body plus the metadata read from its front matter."""

    name: str
    body: Template
    template_id: str = ""
    version: str = ""
    system_message: str = ""
    requires: Tuple[str, ...] = ()
    defaults: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_text(cls, name: str, text: str) -> "PromptTemplate":
        metadata, body = parse_front_matter(text)
        return cls(
            name=name,
            body=_JINJA_ENV.from_string(body),
            template_id=str(metadata.get("id") or name),
            version=str(metadata.get("version") or ""),
            system_message=str(metadata.get("system_message") or "").strip(),
            requires=_as_names(metadata.get("requires")),
            defaults=MappingProxyType(
                {key: value for key, value in metadata.items() if key not in _IDENTITY_KEYS}
            ),
        )

    def render(self, context: Mapping[str, Any]) -> str:
        missing = tuple(key for key in self.requires if key not in context)
        if missing:
            raise MissingTemplateFieldsError(self.name, missing)
        return self.body.render({**self.defaults, **context})


def load_template(name: str) -> PromptTemplate:
    """Return the packaged template ``name``, parsing it on first use only."""

    with _templates_lock:
        template = _templates.get(name)
        if template is None:
            text = resources.files(__name__).joinpath(name).read_text(encoding="utf-8")
            template = _templates[name] = PromptTemplate.from_text(name, text)
    return template


def parse_front_matter(text: str) -> Tuple[Dict[str, Any], str]:
    """Split ``---`` delimited YAML front matter from the template body."""

    lines = text.splitlines()
    if not lines or lines[0].strip() != "---":
        return {}, text

    try:
        end = lines.index("---", 1)
    except ValueError:
        raise ValueError("Unterminated YAML front matter in template") from None

    metadata = yaml.safe_load("\n".join(lines[1:end])) or {}
    if not isinstance(metadata, dict):
        raise ValueError("Template front matter must be a mapping")
    return metadata, "\n".join(lines[end + 1 :])


__all__ = ["MissingTemplateFieldsError", "PromptTemplate", "load_template", "parse_front_matter"]
