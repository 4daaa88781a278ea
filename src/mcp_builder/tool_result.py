"""
Tool result types - the shape a tool invocation hands back
"""

import json
from dataclasses import dataclass
from typing import Any, ClassVar, Dict, List, Mapping, Tuple, Union


@dataclass(frozen=True)
class TextContent:
    """Plain text content item"""
    type: ClassVar[str] = "text"
    text: str

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "text": self.text}


@dataclass(frozen=True)
class ImageContent:
    """Base64 encoded image content item"""
    type: ClassVar[str] = "image"
    data: str
    mime_type: str

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "data": self.data, "mimeType": self.mime_type}


@dataclass(frozen=True)
class ResourceContent:
    """Embedded resource content item"""
    type: ClassVar[str] = "resource"
    resource: Mapping[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "resource": dict(self.resource)}


@dataclass(frozen=True)
class UIContent:
    """UI component content item"""
    type: ClassVar[str] = "ui"
    component: Mapping[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "component": dict(self.component)}


Content = Union[TextContent, ImageContent, ResourceContent, UIContent]


def content_from_dict(data: Mapping[str, Any]) -> Content:
    """Build a content item from its wire form"""
    content_type = data.get("type")

    if content_type == TextContent.type:
        return TextContent(text=data["text"])
    if content_type == ImageContent.type:
        return ImageContent(data=data["data"], mime_type=data["mimeType"])
    if content_type == ResourceContent.type:
        return ResourceContent(resource=data["resource"])
    if content_type == UIContent.type:
        return UIContent(component=data["component"])

    raise ValueError(f"Unknown content type: {content_type!r}")


@dataclass(frozen=True)
class ToolResult:
    """Result of calling a tool: a sequence of content items"""
    content: Tuple[Content, ...] = ()
    is_error: bool = False

    @classmethod
    def text(cls, text: str, is_error: bool = False) -> "ToolResult":
        return cls(content=(TextContent(text=text),), is_error=is_error)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ToolResult":
        """Build a result from the wire shape ``{"content": [...], "isError": bool}``"""
        content = data.get("content")
        if not isinstance(content, list):
            raise ValueError("Tool result must have a 'content' list")

        return cls(
            content=tuple(content_from_dict(item) for item in content),
            is_error=bool(data.get("isError", False)),
        )

    @classmethod
    def coerce(cls, value: Union["ToolResult", Mapping[str, Any]]) -> "ToolResult":
        """Accept either a ToolResult or its wire form"""
        if isinstance(value, ToolResult):
            return value
        if isinstance(value, Mapping):
            return cls.from_dict(value)
        raise TypeError(f"Expected a ToolResult or mapping, got {type(value).__name__}")

    def content_types(self) -> List[str]:
        return [item.type for item in self.content]

    def text_content(self) -> str:
        """All text items, in order, joined by newlines"""
        return "\n".join(item.text for item in self.content if isinstance(item, TextContent))

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"content": [item.to_dict() for item in self.content]}
        if self.is_error:
            result["isError"] = True
        return result

    def to_json(self) -> str:
        return json.dumps(self.to_dict())
