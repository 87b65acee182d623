"""Interactive element records produced by the element extractor.

One dataclass per category. Each carries only the fields that apply to
its category and serializes to the camelCase JSON shape sent to the
recommendation model.
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List


@dataclass
class InteractiveElement:
    """Fields shared by every category."""

    tag_name: str
    attributes: Dict[str, str]
    selector: str

    type: ClassVar[str] = ""

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"type": self.type, "tagName": self.tag_name}
        data.update(self._extra_fields())
        data["attributes"] = dict(self.attributes)
        data["selector"] = self.selector
        return data

    def _extra_fields(self) -> Dict[str, Any]:
        return {}


@dataclass
class ButtonElement(InteractiveElement):
    text: str = ""

    type: ClassVar[str] = "button"

    def _extra_fields(self) -> Dict[str, Any]:
        return {"text": self.text}


@dataclass
class InputElement(InteractiveElement):
    placeholder: str = ""
    input_type: str = ""

    type: ClassVar[str] = "input"

    def _extra_fields(self) -> Dict[str, Any]:
        return {"placeholder": self.placeholder, "inputType": self.input_type}


@dataclass
class SelectElement(InteractiveElement):
    options: List[str] = field(default_factory=list)

    type: ClassVar[str] = "select"

    def _extra_fields(self) -> Dict[str, Any]:
        return {"options": list(self.options)}


@dataclass
class FormElement(InteractiveElement):
    action: str = ""
    method: str = "get"

    type: ClassVar[str] = "form"

    def _extra_fields(self) -> Dict[str, Any]:
        return {"action": self.action, "method": self.method}


@dataclass
class LinkElement(InteractiveElement):
    text: str = ""
    href: str = "#"

    type: ClassVar[str] = "link"

    def _extra_fields(self) -> Dict[str, Any]:
        return {"text": self.text, "href": self.href}


def elements_to_dicts(elements: List[InteractiveElement]) -> List[Dict[str, Any]]:
    """Serialize an inventory to plain JSON-compatible dicts."""
    return [el.to_dict() for el in elements]
