"""
Trigger Nodes - conditions that start a chatbot conversation.

Triggers say *when* a workflow runs. They take no input from the
conversation and always expose exactly one default output.
"""

from __future__ import annotations

from typing import List, Literal

from pydantic import Field, field_validator

from chatflow.workflow.nodes.base import (
    BaseNode,
    NodeConfig,
    NodeKind,
    OutputArity,
    register_node,
)


class TriggerNode(BaseNode):
    kind = NodeKind.TRIGGER
    output_arity = OutputArity.FIXED_ONE
    category = "trigger"
    color = "#16a34a"


# ============================================================================
# Message Trigger
# ============================================================================


class MessageTriggerConfig(NodeConfig):
    keywords: List[str] = Field(default_factory=list)
    match_type: Literal["any", "exact", "contains"] = "any"

    @field_validator("keywords")
    @classmethod
    def _strip_keywords(cls, value: List[str]) -> List[str]:
        return [k.strip() for k in value if k.strip()]


@register_node
class MessageTriggerNode(TriggerNode):
    """Start on an incoming message, optionally filtered by keyword."""

    node_type = "messageTrigger"
    label = "Message Trigger"
    description = "Trigger on message received"
    icon = "⚡"
    token_cost = 1
    config_model = MessageTriggerConfig


# ============================================================================
# First Message of the Day
# ============================================================================


class FirstMessageTriggerConfig(NodeConfig):
    timezone: str = "Asia/Bahrain"


@register_node
class FirstMessageTriggerNode(TriggerNode):
    """Start on the first message a contact sends on a local calendar day."""

    node_type = "firstMessageTrigger"
    label = "First Message of Day"
    description = "Trigger on a contact's first message of the day"
    icon = "🌅"
    token_cost = 1
    config_model = FirstMessageTriggerConfig


# ============================================================================
# Schedule / Webhook / Manual
# ============================================================================


class ScheduleTriggerConfig(NodeConfig):
    cron: str = ""
    timezone: str = "UTC"


@register_node
class ScheduleTriggerNode(TriggerNode):
    node_type = "scheduleTrigger"
    label = "Schedule Trigger"
    description = "Trigger at scheduled time"
    icon = "📅"
    token_cost = 3
    config_model = ScheduleTriggerConfig


@register_node
class WebhookTriggerNode(TriggerNode):
    node_type = "webhookTrigger"
    label = "Webhook Trigger"
    description = "Trigger via external webhook"
    icon = "🪝"
    token_cost = 3


@register_node
class ManualTriggerNode(TriggerNode):
    node_type = "manualTrigger"
    label = "Manual Trigger"
    description = "Manually triggered action"
    icon = "👤"
    token_cost = 1
