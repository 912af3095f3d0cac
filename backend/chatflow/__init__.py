"""
Chatflow - authoring core of the WhatsApp chatbot workflow builder.
"""

__version__ = "0.1.0"
