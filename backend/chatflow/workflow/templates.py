"""
Pre-built Chatbot Templates.

Provides factory functions that return ready-made ``WorkflowRecord``
objects for common conversation shapes. They are saved to the
WorkflowStore on first startup so users can clone or study them.
"""

from __future__ import annotations

from typing import List

from chatflow.workflow.workflow_layout import apply_layout
from chatflow.workflow.workflow_model import WorkflowGraph, WorkflowRecord


def _record_from(graph: WorkflowGraph, template_id: str, name: str, template_name: str) -> WorkflowRecord:
    apply_layout(graph)
    return WorkflowRecord(
        id=template_id,
        name=name,
        is_active=False,
        nodes=graph.nodes,
        edges=graph.edges,
        entry_node_id=graph.entry_node_id,
        is_template=True,
        template_name=template_name,
    )


# ============================================================================
# Welcome menu
# ============================================================================


def create_welcome_menu_template() -> WorkflowRecord:
    """Greet a contact once a day and offer three choices.

    Topology::
        firstMessageTrigger → quickReply (menu)
          [hours]    → message.text
          [location] → message.location
          [agent]    → message.text
    """
    g = WorkflowGraph()
    trigger = g.add_node("firstMessageTrigger", "Start")
    menu = g.add_node("quickReply", "Welcome Menu", config={
        "headerText": "Welcome!",
        "bodyText": "Hi there 👋 How can we help you today?",
        "footerText": "Tap a button to continue",
        "buttons": [
            {"id": "hours", "title": "Opening hours"},
            {"id": "location", "title": "Find us"},
            {"id": "agent", "title": "Talk to an agent"},
        ],
    })
    hours = g.add_node("message.text", "Opening Hours", config={
        "text": "We are open Sunday to Thursday, 9:00 to 18:00.",
    })
    where = g.add_node("message.location", "Our Location", config={
        "latitude": 26.2285,
        "longitude": 50.5860,
        "name": "Head Office",
        "address": "Manama, Bahrain",
    })
    agent = g.add_node("message.text", "Agent Handoff", config={
        "text": "Thanks! An agent will reply to you shortly.",
    })

    g.connect(trigger.id, None, menu.id)
    g.connect(menu.id, "hours", hours.id)
    g.connect(menu.id, "location", where.id)
    g.connect(menu.id, "agent", agent.id)
    g.set_entry_node(menu.id)

    return _record_from(g, "template-welcome-menu", "Welcome Menu", "welcome_menu")


# ============================================================================
# Catalog list
# ============================================================================


def create_catalog_list_template() -> WorkflowRecord:
    """Answer a keyword with a sectioned product list.

    Topology::
        messageTrigger("menu", "catalog") → listMessage
          [plan_basic] [plan_pro] → message.text
          [support]               → message.text
    """
    g = WorkflowGraph()
    trigger = g.add_node("messageTrigger", "Catalog Keyword", config={
        "keywords": ["menu", "catalog"],
        "matchType": "contains",
    })
    catalog = g.add_node("listMessage", "Catalog", config={
        "headerText": "Our catalog",
        "bodyText": "Pick an option from the list below.",
        "buttonLabel": "View options",
        "sections": [
            {
                "title": "Plans",
                "rows": [
                    {"id": "plan_basic", "title": "Basic", "description": "For small teams"},
                    {"id": "plan_pro", "title": "Pro", "description": "Bulk campaigns and chatbots"},
                ],
            },
            {
                "title": "Help",
                "rows": [
                    {"id": "support", "title": "Support"},
                ],
            },
        ],
    })
    plans = g.add_node("message.text", "Plan Details", config={
        "text": "A sales representative will send you the full price list.",
    })
    support = g.add_node("message.text", "Support", config={
        "text": "Describe your problem and our support team will get back to you.",
    })

    g.connect(trigger.id, None, catalog.id)
    g.connect(catalog.id, "plan_basic", plans.id)
    g.connect(catalog.id, "plan_pro", plans.id)
    g.connect(catalog.id, "support", support.id)
    g.set_entry_node(catalog.id)

    return _record_from(g, "template-catalog-list", "Catalog List", "catalog_list")


# ============================================================================
# Registry of all built-in templates
# ============================================================================

ALL_TEMPLATES = [
    create_welcome_menu_template,
    create_catalog_list_template,
]


def install_templates(store) -> int:
    """Install built-in templates into the workflow store.

    Always overwrites existing templates to keep them up-to-date.
    Returns the number of templates installed.
    """
    installed = 0
    for factory in ALL_TEMPLATES:
        template = factory()
        existing = store.load(template.id)
        if existing is not None:
            template.version = existing.version
            template.created_at = existing.created_at
        store.save(template)
        installed += 1
    return installed
