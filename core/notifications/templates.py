"""
Bot message texts.

Texts live in messages.yaml, keyed by message type and then by where the
message goes: "discord" for a direct message, "discord_channel" for a
channel broadcast.
"""

from pathlib import Path

import yaml


CHANNELS = ("discord", "discord_channel")

_templates: dict | None = None


def load_templates() -> dict:
    """Load messages.yaml once and check every entry names a known channel."""
    global _templates
    if _templates is not None:
        return _templates

    yaml_path = Path(__file__).parent / "messages.yaml"
    with open(yaml_path, encoding="utf-8") as f:
        loaded = yaml.safe_load(f)

    for message_type, variants in loaded.items():
        unknown = set(variants) - set(CHANNELS)
        if unknown:
            raise ValueError(
                f"Template {message_type!r} has unknown channel(s): {sorted(unknown)}"
            )

    _templates = loaded
    return _templates


def render_message(template: str, context: dict) -> str:
    """
    Fill {placeholders} in a template.

    Raises:
        KeyError: If a required variable is missing from context
    """
    return template.format(**context)


def get_message(message_type: str, channel: str, context: dict) -> str:
    """
    Render the text for a message type as sent to one kind of channel.

    Args:
        message_type: e.g. "health_probe", "scheduled_reminder"
        channel: "discord" or "discord_channel"
        context: Variables to substitute

    Raises:
        KeyError: If the message type has no text for that channel
    """
    variants = load_templates()[message_type]
    if channel not in variants:
        raise KeyError(f"No {channel!r} text for message type {message_type!r}")
    return render_message(variants[channel], context)
