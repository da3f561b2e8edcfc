"""cordhook: signed interaction webhooks and command registry sync."""

__version__ = "0.1.0"
