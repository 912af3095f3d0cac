"""Tests for the node catalog and per-type config shapes."""

import pytest

from chatflow.workflow.errors import InvalidNodeConfig, UnknownNodeType
from chatflow.workflow.nodes import register_all_nodes
from chatflow.workflow.nodes.base import (
    BaseNode,
    NodeKind,
    NodeRegistry,
    OutputArity,
    get_node_registry,
)


TRIGGER_TYPES = [
    "messageTrigger",
    "firstMessageTrigger",
    "scheduleTrigger",
    "webhookTrigger",
    "manualTrigger",
]
INTERACTIVE_TYPES = [
    "quickReply",
    "quickReplyImage",
    "quickReplyVideo",
    "buttons",
    "listMessage",
    "carousel",
    "callButton",
    "urlButton",
    "copyButton",
]
TERMINAL_TYPES = ["message.text", "message.media", "message.location"]


@pytest.fixture
def registry():
    return get_node_registry()


class TestRegistry:
    """Lookup and grouping of registered node types."""

    def test_all_builtin_types_registered(self, registry):
        """Every built-in type tag resolves."""
        register_all_nodes()
        assert len(registry) == 17
        for node_type in TRIGGER_TYPES + INTERACTIVE_TYPES + TERMINAL_TYPES:
            assert node_type in registry

    @pytest.mark.parametrize("node_type,kind", [
        ("firstMessageTrigger", NodeKind.TRIGGER),
        ("quickReply", NodeKind.INTERACTIVE),
        ("listMessage", NodeKind.INTERACTIVE),
        ("message.text", NodeKind.TERMINAL),
        ("message.location", NodeKind.TERMINAL),
    ])
    def test_type_tag_determines_kind(self, registry, node_type, kind):
        """The kind is fixed by the type tag."""
        assert registry.lookup(node_type).kind == kind

    def test_lookup_unknown_type(self, registry):
        """Unknown tags raise UnknownNodeType."""
        with pytest.raises(UnknownNodeType) as exc_info:
            registry.lookup("doesNotExist")
        assert exc_info.value.node_type == "doesNotExist"
        assert registry.get("doesNotExist") is None

    def test_terminal_types_have_no_outputs(self, registry):
        """No terminal node type can declare output slots."""
        for base in registry.list_by_kind(NodeKind.TERMINAL):
            assert base.output_arity == OutputArity.NONE
            assert base.get_output_ports({}) == []

    def test_register_rejects_terminal_with_outputs(self):
        """A terminal type with outputs cannot be registered."""

        class BrokenTerminal(BaseNode):
            node_type = "brokenTerminal"
            kind = NodeKind.TERMINAL
            output_arity = OutputArity.FIXED_ONE

        with pytest.raises(ValueError):
            NodeRegistry().register(BrokenTerminal)

    def test_register_requires_type_tag(self):
        """Types without a tag are rejected."""

        class Nameless(BaseNode):
            pass

        with pytest.raises(ValueError):
            NodeRegistry().register(Nameless)

    def test_catalog_grouped_by_kind(self, registry):
        """The palette lists every type under its kind."""
        catalog = registry.catalog()
        assert set(catalog) == {"trigger", "interactive", "terminal"}
        trigger_tags = [entry["node_type"] for entry in catalog["trigger"]]
        assert trigger_tags == TRIGGER_TYPES
        entry = catalog["interactive"][0]
        assert entry["output_arity"] == "derived"
        assert "properties" in entry["config_schema"]


class TestOutputSlots:
    """Derived output slots per node type."""

    def test_trigger_has_single_default_slot(self, registry):
        """Triggers expose exactly one implicit slot."""
        base = registry.lookup("firstMessageTrigger")
        ports = base.get_output_ports({})
        assert len(ports) == 1
        assert ports[0].id is None
        assert base.has_output_port({}, None)
        assert base.has_output_port({}, "default")
        assert not base.has_output_port({}, "b1")

    def test_quick_reply_slot_per_button(self, registry, yes_no_config):
        """One slot per reply button, in button order."""
        base = registry.lookup("quickReply")
        ports = base.get_output_ports(yes_no_config)
        assert [p.id for p in ports] == ["b1", "b2"]
        assert [p.label for p in ports] == ["Yes", "No"]
        assert not base.has_output_port(yes_no_config, None)

    def test_quick_reply_without_buttons_uses_default_slot(self, registry):
        """A menu with no buttons yet still has one way out."""
        base = registry.lookup("quickReply")
        assert [p.id for p in base.get_output_ports({"bodyText": "hi"})] == [None]

    def test_list_message_slots_span_all_sections(self, registry):
        """Rows from every section become slots."""
        config = {
            "bodyText": "Pick one",
            "sections": [
                {"title": "A", "rows": [{"id": "r1", "title": "One"}, {"id": "r2", "title": "Two"}]},
                {"title": "B", "rows": [{"id": "r3", "title": "Three"}]},
            ],
        }
        ports = registry.lookup("listMessage").get_output_ports(config)
        assert [p.id for p in ports] == ["r1", "r2", "r3"]
        assert [p.group for p in ports] == ["A", "A", "B"]

    def test_carousel_has_single_default_slot(self, registry):
        """Card buttons do not branch; the carousel has one way out."""
        config = {
            "cards": [
                {"id": "c1", "buttons": [
                    {"id": "buy", "type": "quick_reply", "title": "Buy"},
                    {"id": "site", "type": "url", "title": "Site", "url": "https://example.com"},
                ]},
            ],
        }
        base = registry.lookup("carousel")
        assert base.output_arity == OutputArity.FIXED_ONE
        assert [p.id for p in base.get_output_ports(config)] == [None]
        assert base.has_output_port(config, None)
        assert not base.has_output_port(config, "buy")

    def test_single_button_types_keep_one_output(self, registry):
        """Call, URL and copy buttons do not branch."""
        for node_type in ("callButton", "urlButton", "copyButton"):
            ports = registry.lookup(node_type).get_output_ports({"buttonTitle": "Go"})
            assert [p.id for p in ports] == [None]


class TestConfigValidation:
    """Per-type config shapes."""

    def test_duplicate_slot_ids_rejected(self, registry):
        """Buttons and rows share one id namespace per node."""
        config = {"buttons": [{"id": "x", "title": "A"}, {"id": "x", "title": "B"}]}
        with pytest.raises(InvalidNodeConfig) as exc_info:
            registry.lookup("quickReply").validate_config(config)
        assert "duplicate slot id 'x'" in exc_info.value.errors[0]

    def test_too_many_buttons_rejected(self, registry):
        """At most three reply buttons."""
        config = {"buttons": [{"id": f"b{i}", "title": str(i)} for i in range(4)]}
        with pytest.raises(InvalidNodeConfig):
            registry.lookup("quickReply").validate_config(config)

    def test_button_title_length_limit(self, registry):
        """Button titles are capped at 25 characters."""
        config = {"buttons": [{"id": "b1", "title": "x" * 26}]}
        with pytest.raises(InvalidNodeConfig):
            registry.lookup("quickReply").validate_config(config)

    def test_location_bounds(self, registry):
        """Latitude must be a real latitude."""
        with pytest.raises(InvalidNodeConfig):
            registry.lookup("message.location").validate_config({"latitude": 120, "longitude": 0})

    def test_stored_config_uses_wire_keys(self, registry):
        """Field names are stored under their camelCase alias."""
        stored = registry.lookup("quickReply").validate_config({"body_text": "hello"})
        assert stored == {"bodyText": "hello"}

    def test_snake_case_keys_accepted(self, registry):
        """Configs validate by field name as well as by wire alias."""
        parsed = registry.lookup("quickReply").parse_config({"body_text": "hello"})
        assert parsed.body_text == "hello"

    def test_unknown_keys_survive(self, registry):
        """Editor-only keys are kept on the stored config."""
        stored = registry.lookup("message.text").validate_config({"text": "hi", "captureReply": True})
        assert stored == {"text": "hi", "captureReply": True}

    def test_content_warnings(self, registry):
        """Unsendable content is reported, not rejected."""
        assert registry.lookup("quickReply").parse_config({}).content_warnings() == [
            "body text is empty",
            "no buttons configured",
        ]
        assert registry.lookup("message.text").parse_config({"text": "ok"}).content_warnings() == []
