"""Tests for interaction payload parsing."""

import pytest

from cordhook.dispatch.interactions import (
    ApplicationCommandInteraction,
    MessageComponentInteraction,
    PingInteraction,
    UnknownInteraction,
    parse_interaction,
)
from cordhook.errors import MalformedInteraction
from cordhook.registry.models import CommandType


def test_parse_ping():
    assert isinstance(parse_interaction(b'{"type": 1, "id": "1"}'), PingInteraction)


def test_parse_command_defaults_to_chat_input():
    interaction = parse_interaction(
        b'{"type": 2, "id": "9", "application_id": "app", "token": "tok",'
        b' "data": {"name": "echo", "options": [{"name": "text", "type": 3, "value": "hi"}]}}'
    )
    assert isinstance(interaction, ApplicationCommandInteraction)
    assert interaction.command_type == CommandType.CHAT_INPUT
    assert interaction.key == "echo:1"
    assert interaction.option("text") == "hi"
    assert interaction.option("missing", "x") == "x"
    assert interaction.application_id == "app"
    assert interaction.token == "tok"
    assert interaction.message_id == "@original"


def test_parse_context_menu_command():
    interaction = parse_interaction(
        b'{"type": 2, "data": {"name": "Profile", "type": 2, "target_id": "42"}}'
    )
    assert interaction.key == "Profile:2"
    assert interaction.target_id == "42"


def test_parse_component_targets_source_message():
    interaction = parse_interaction(
        b'{"type": 3, "message": {"id": "m1"}, "data": {"custom_id": "btn", "component_type": 2}}'
    )
    assert isinstance(interaction, MessageComponentInteraction)
    assert interaction.key == "btn"
    assert interaction.message_id == "m1"


def test_parse_unknown_type():
    assert isinstance(parse_interaction(b'{"type": 5}'), UnknownInteraction)


@pytest.mark.parametrize("body", [b"not json", b"[1, 2]", b'"ping"', b"\xff\xfe"])
def test_malformed_body(body):
    with pytest.raises(MalformedInteraction):
        parse_interaction(body)


def test_parse_ping_ignores_data_shape():
    assert isinstance(parse_interaction(b'{"type": 1, "data": "x"}'), PingInteraction)


def test_command_with_non_object_data_is_malformed():
    with pytest.raises(MalformedInteraction):
        parse_interaction(b'{"type": 2, "data": "x"}')
