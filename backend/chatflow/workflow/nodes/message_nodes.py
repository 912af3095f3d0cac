"""
Terminal Message Nodes - plain messages that end a conversation path.
"""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import Field

from chatflow.workflow.nodes.base import (
    BaseNode,
    NodeConfig,
    NodeKind,
    OutputArity,
    register_node,
)


class TerminalMessageNode(BaseNode):
    kind = NodeKind.TERMINAL
    output_arity = OutputArity.NONE
    category = "message"
    color = "#dc2626"
    token_cost = 1


class TextMessageConfig(NodeConfig):
    text: str = ""

    def content_warnings(self) -> List[str]:
        return [] if self.text.strip() else ["message text is empty"]


@register_node
class TextMessageNode(TerminalMessageNode):
    node_type = "message.text"
    label = "Text Message"
    description = "Send a text message and end the conversation"
    icon = "✉️"
    config_model = TextMessageConfig


class MediaMessageConfig(NodeConfig):
    media_type: Literal["image", "video", "audio", "document"] = "image"
    media_url: str = ""
    caption: str = ""

    def content_warnings(self) -> List[str]:
        return [] if self.media_url else ["media URL is empty"]


@register_node
class MediaMessageNode(TerminalMessageNode):
    node_type = "message.media"
    label = "Media Message"
    description = "Send an image, video, audio or document and end the conversation"
    icon = "📎"
    config_model = MediaMessageConfig


class LocationMessageConfig(NodeConfig):
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    name: str = ""
    address: str = ""

    def content_warnings(self) -> List[str]:
        if self.latitude is None or self.longitude is None:
            return ["coordinates are not set"]
        return []


@register_node
class LocationMessageNode(TerminalMessageNode):
    node_type = "message.location"
    label = "Location Message"
    description = "Send a map location and end the conversation"
    icon = "📍"
    config_model = LocationMessageConfig
