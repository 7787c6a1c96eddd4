"""Build node trees from plain data loaded from YAML or JSON."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .nodes import EMPTY, Document, Element, Group, Node, Raw, Repeated, Text, tag
from .templating import TemplateLibrary, template_fragment


class StyleData(BaseModel):
    """One inline style entry on an element."""

    property: str = Field(..., min_length=1, description="CSS property name.")
    value: Union[str, int, float] = Field(..., description="CSS value.")
    media: Optional[str] = Field(None, description="At-rule wrapping the generated rule.")
    selector: Optional[str] = Field(None, description="Selector prefix for the rule.")
    pseudo: Optional[str] = Field(None, description="Pseudo-class or pseudo-element suffix.")

    model_config = ConfigDict(extra="forbid")


class ElementData(BaseModel):
    """Mapping shape accepted for a single element."""

    tag: str = Field(..., description="Element tag name.")
    attrs: Dict[str, Union[str, bool, int, float, None]] = Field(
        default_factory=dict, description="Attributes in insertion order."
    )
    classes: Union[str, List[str]] = Field(
        default_factory=list, description="Class tokens merged into the class attribute."
    )
    styles: List[StyleData] = Field(
        default_factory=list, description="Declarations turned into generated classes."
    )
    children: Any = Field(None, description="Child node data.")
    void: Optional[bool] = Field(None, description="Override void-element detection.")

    model_config = ConfigDict(extra="forbid")


class DocumentData(BaseModel):
    body: Any = None
    head: Any = None
    lang: Optional[str] = None

    model_config = ConfigDict(extra="forbid")


def _validate(model: type, data: Dict[str, Any]) -> Any:
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise ValueError(f"Invalid {model.__name__} data: {exc}") from exc


def _element_from_data(data: Dict[str, Any], templates: Optional[TemplateLibrary]) -> Element:
    parsed: ElementData = _validate(ElementData, data)
    element = tag(parsed.tag, void=parsed.void)
    children = node_from_data(parsed.children, templates=templates)
    if children is not EMPTY:
        element = element(children)
    for name, value in parsed.attrs.items():
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            value = str(value)
        element = element.attribute(name, value)
    classes = parsed.classes.split() if isinstance(parsed.classes, str) else parsed.classes
    if classes:
        element = element.add_class(*classes)
    for style in parsed.styles:
        element = element.inline_style(
            style.property,
            str(style.value),
            media=style.media,
            selector=style.selector,
            pseudo=style.pseudo,
        )
    return element


def node_from_data(data: Any, *, templates: Optional[TemplateLibrary] = None) -> Node:
    """Convert strings, lists and tagged mappings into nodes."""

    if data is None:
        return EMPTY
    if isinstance(data, str):
        return Text(data)
    if isinstance(data, (int, float)) and not isinstance(data, bool):
        return Text(str(data))
    if isinstance(data, list):
        return Group(tuple(node_from_data(item, templates=templates) for item in data))
    if not isinstance(data, dict):
        raise ValueError(f"Unsupported node data: {data!r}")

    if "tag" in data:
        return _element_from_data(data, templates)
    if "text" in data:
        return Text(str(data["text"]))
    if "raw" in data:
        return Raw(str(data["raw"]))
    if "group" in data:
        return node_from_data(list(data["group"] or []), templates=templates)
    if "repeat" in data:
        items = data["repeat"] or []
        return Repeated(tuple(node_from_data(item, templates=templates) for item in items))
    if "document" in data:
        parsed: DocumentData = _validate(DocumentData, data["document"] or {})
        return Document(
            body=node_from_data(parsed.body, templates=templates),
            head=node_from_data(parsed.head, templates=templates),
            lang=parsed.lang,
        )
    if "template" in data:
        variables = data.get("vars") or {}
        return template_fragment(str(data["template"]), **variables)
    if "template_file" in data:
        if templates is None:
            raise ValueError("template_file requires a template directory")
        variables = data.get("vars") or {}
        return templates.fragment(str(data["template_file"]), **variables)
    raise ValueError(f"Unrecognized node mapping with keys: {', '.join(sorted(data))}")


def load_tree(path: Path, *, templates: Optional[TemplateLibrary] = None) -> Node:
    """Load node data from a YAML (or JSON) file."""

    data = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    return node_from_data(data, templates=templates)


__all__ = ["DocumentData", "ElementData", "StyleData", "load_tree", "node_from_data"]
