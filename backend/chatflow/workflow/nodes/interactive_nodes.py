"""
Interactive Message Nodes - messages the contact can answer.

Reply-button and list messages expose one output slot per button or
list row, so each answer can branch to a different node. Call, URL
and copy buttons do not produce a reply and keep a single output.
"""

from __future__ import annotations

from typing import List, Literal

from pydantic import Field

from chatflow.workflow.nodes.base import (
    BaseNode,
    NodeConfig,
    NodeKind,
    OutputArity,
    OutputPort,
    WireModel,
    register_node,
)

MAX_BUTTONS = 3
MAX_SECTIONS = 10
MAX_CARDS = 10
MAX_TITLE_LENGTH = 25


class InteractiveNode(BaseNode):
    kind = NodeKind.INTERACTIVE
    output_arity = OutputArity.DERIVED
    category = "message"
    color = "#2563eb"


# ============================================================================
# Reply buttons
# ============================================================================


class ReplyButton(WireModel):
    id: str = Field(min_length=1)
    title: str = Field(default="", max_length=MAX_TITLE_LENGTH)


class ButtonMessageConfig(NodeConfig):
    header_text: str = ""
    body_text: str = ""
    footer_text: str = ""
    buttons: List[ReplyButton] = Field(default_factory=list, max_length=MAX_BUTTONS)

    def output_slots(self) -> List[OutputPort]:
        return [
            OutputPort(id=b.id, label=b.title or f"Button {i + 1}", group="buttons")
            for i, b in enumerate(self.buttons)
        ]

    def content_warnings(self) -> List[str]:
        warnings = [] if self.body_text.strip() else ["body text is empty"]
        if not self.buttons:
            warnings.append("no buttons configured")
        return warnings


class MediaButtonMessageConfig(ButtonMessageConfig):
    media_url: str = ""

    def content_warnings(self) -> List[str]:
        warnings = super().content_warnings()
        if not self.media_url:
            warnings.append("media URL is empty")
        return warnings


@register_node
class QuickReplyNode(InteractiveNode):
    """Text with up to three reply buttons, one branch per button."""

    node_type = "quickReply"
    label = "Quick Reply Buttons"
    description = "Text with up to 3 reply buttons"
    icon = "💬"
    token_cost = 1
    config_model = ButtonMessageConfig


@register_node
class QuickReplyImageNode(InteractiveNode):
    node_type = "quickReplyImage"
    label = "Buttons with Image"
    description = "Image with up to 3 reply buttons"
    icon = "🖼️"
    token_cost = 2
    config_model = MediaButtonMessageConfig


@register_node
class QuickReplyVideoNode(InteractiveNode):
    node_type = "quickReplyVideo"
    label = "Buttons with Video"
    description = "Video with up to 3 reply buttons"
    icon = "🎬"
    token_cost = 2
    config_model = MediaButtonMessageConfig


class CallToActionButton(ReplyButton):
    kind: Literal["phone_number", "url"] = "phone_number"
    value: str = ""


class CallToActionButtonsConfig(ButtonMessageConfig):
    buttons: List[CallToActionButton] = Field(default_factory=list, max_length=MAX_BUTTONS)


@register_node
class ButtonsNode(InteractiveNode):
    """Up to three phone or URL buttons on one message."""

    node_type = "buttons"
    label = "Buttons"
    description = "Message with up to 3 phone or URL buttons"
    icon = "🔘"
    token_cost = 1
    config_model = CallToActionButtonsConfig


# ============================================================================
# List message
# ============================================================================


class ListRow(WireModel):
    id: str = Field(min_length=1)
    title: str = Field(default="", max_length=MAX_TITLE_LENGTH)
    description: str = ""


class ListSection(WireModel):
    title: str = ""
    rows: List[ListRow] = Field(default_factory=list)


class ListMessageConfig(NodeConfig):
    header_text: str = ""
    body_text: str = ""
    footer_text: str = ""
    button_label: str = ""
    sections: List[ListSection] = Field(default_factory=list, max_length=MAX_SECTIONS)

    def output_slots(self) -> List[OutputPort]:
        return [
            OutputPort(id=row.id, label=row.title, group=section.title)
            for section in self.sections
            for row in section.rows
        ]

    def content_warnings(self) -> List[str]:
        warnings = [] if self.body_text.strip() else ["body text is empty"]
        if not self.output_slots():
            warnings.append("list has no rows")
        return warnings


@register_node
class ListMessageNode(InteractiveNode):
    """Expandable list; every row across all sections is a branch."""

    node_type = "listMessage"
    label = "List Message"
    description = "Expandable list of options"
    icon = "📋"
    token_cost = 1
    config_model = ListMessageConfig


# ============================================================================
# Carousel
# ============================================================================


class CarouselButton(WireModel):
    id: str = Field(min_length=1)
    type: Literal["quick_reply", "url"] = "quick_reply"
    title: str = Field(default="", max_length=MAX_TITLE_LENGTH)
    url: str = ""


class CarouselCard(WireModel):
    id: str = ""
    media: str = ""
    text: str = ""
    buttons: List[CarouselButton] = Field(default_factory=list)


class CarouselConfig(NodeConfig):
    body_text: str = ""
    cards: List[CarouselCard] = Field(default_factory=list, max_length=MAX_CARDS)

    def content_warnings(self) -> List[str]:
        return [] if self.cards else ["carousel has no cards"]


@register_node
class CarouselNode(InteractiveNode):
    """Swipeable cards; card buttons do not branch, the node has one way out."""

    node_type = "carousel"
    label = "Carousel"
    description = "Swipeable cards with buttons"
    icon = "🎠"
    token_cost = 3
    config_model = CarouselConfig
    output_arity = OutputArity.FIXED_ONE


# ============================================================================
# Single call-to-action buttons
# ============================================================================


class SingleButtonConfig(NodeConfig):
    header_text: str = ""
    body_text: str = ""
    footer_text: str = ""
    button_title: str = Field(default="", max_length=MAX_TITLE_LENGTH)
    button_id: str = ""

    def content_warnings(self) -> List[str]:
        return [] if self.body_text.strip() else ["body text is empty"]


class CallButtonConfig(SingleButtonConfig):
    phone_number: str = ""


class UrlButtonConfig(SingleButtonConfig):
    url: str = ""


class CopyButtonConfig(SingleButtonConfig):
    copy_code: str = ""


class SingleButtonNode(InteractiveNode):
    output_arity = OutputArity.FIXED_ONE


@register_node
class CallButtonNode(SingleButtonNode):
    node_type = "callButton"
    label = "Call Button"
    description = "Button to initiate phone call"
    icon = "📞"
    config_model = CallButtonConfig


@register_node
class UrlButtonNode(SingleButtonNode):
    node_type = "urlButton"
    label = "URL Button"
    description = "Button to open a website"
    icon = "🔗"
    config_model = UrlButtonConfig


@register_node
class CopyButtonNode(SingleButtonNode):
    node_type = "copyButton"
    label = "Copy/OTP Button"
    description = "Button to copy text (OTP codes)"
    icon = "📋"
    config_model = CopyButtonConfig
