from __future__ import annotations

from typing import Any

import jsonschema

SCRIPT_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["instructions"],
    "properties": {
        "settings": {
            "type": "object",
            "properties": {
                "width": {"type": "integer", "minimum": 1},
                "height": {"type": "integer", "minimum": 1},
                "title": {"type": ["string", "null"]},
                "shell": {"$ref": "#/definitions/shell"},
                "environment": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "required": ["name", "value"],
                        "properties": {
                            "name": {"type": "string", "minLength": 1},
                            "value": {"type": ["string", "number", "boolean"]},
                        },
                        "additionalProperties": False,
                    },
                },
                "environment_capture": {"type": "array", "items": {"type": "string"}},
                "type_speed": {"type": "string"},
                "prompt": {"type": "string"},
                "secondary_prompt": {"type": "string"},
                "timeout": {"type": "string"},
            },
            "additionalProperties": False,
        },
        "instructions": {
            "type": "array",
            "items": {"$ref": "#/definitions/instruction"},
        },
    },
    "additionalProperties": False,
    "definitions": {
        "instruction": {
            "oneOf": [
                {"const": "Clear"},
                {
                    "type": "object",
                    "required": ["Command"],
                    "properties": {
                        "Command": {
                            "type": "object",
                            "required": ["command"],
                            "properties": {
                                "command": {"$ref": "#/definitions/command"},
                                "hidden": {"type": "boolean"},
                                "type_speed": {"type": ["string", "null"]},
                            },
                            "additionalProperties": False,
                        }
                    },
                    "additionalProperties": False,
                },
                {
                    "type": "object",
                    "required": ["Interactive"],
                    "properties": {
                        "Interactive": {
                            "type": "object",
                            "required": ["command", "keys"],
                            "properties": {
                                "command": {"$ref": "#/definitions/command"},
                                "keys": {"type": "array", "items": {"$ref": "#/definitions/key"}},
                                "type_speed": {"type": ["string", "null"]},
                            },
                            "additionalProperties": False,
                        }
                    },
                    "additionalProperties": False,
                },
                {
                    "type": "object",
                    "required": ["Wait"],
                    "properties": {"Wait": {"type": "string"}},
                    "additionalProperties": False,
                },
                {
                    "type": "object",
                    "required": ["Marker"],
                    "properties": {"Marker": {"type": "string"}},
                    "additionalProperties": False,
                },
                {
                    "type": "object",
                    "required": ["Clear"],
                    "properties": {"Clear": {"type": "null"}},
                    "additionalProperties": False,
                },
            ]
        },
        "command": {
            "oneOf": [
                {"type": "string"},
                {"type": "array", "items": {"type": "string"}, "minItems": 1},
                {
                    "type": "object",
                    "minProperties": 1,
                    "maxProperties": 1,
                    "properties": {
                        "SingleLine": {"type": "string"},
                        "MultiLine": {"type": "array", "items": {"type": "string"}, "minItems": 1},
                        "Control": {"type": "string"},
                    },
                    "additionalProperties": False,
                },
            ]
        },
        "key": {
            "oneOf": [
                {"type": "string", "minLength": 1},
                {"type": "integer"},
                {
                    "type": "object",
                    "minProperties": 1,
                    "maxProperties": 1,
                    "properties": {
                        "Char": {"type": ["string", "integer"]},
                        "Str": {"type": "string"},
                        "String": {"type": "string"},
                        "Control": {"type": "string"},
                        "Wait": {"type": "string"},
                    },
                    "additionalProperties": False,
                },
            ]
        },
        "custom_shell": {
            "type": "object",
            "required": ["program", "prompt", "line_split"],
            "properties": {
                "program": {"type": "string", "minLength": 1},
                "args": {"type": "array", "items": {"type": "string"}},
                "prompt": {"type": "string", "minLength": 1},
                "line_split": {"type": "string"},
                "quit_command": {"type": ["string", "null"]},
                "echo": {"type": "boolean"},
            },
            "additionalProperties": False,
        },
        "shell": {
            "oneOf": [
                {"enum": ["bash", "Bash", "python", "Python"]},
                {"$ref": "#/definitions/custom_shell"},
                {
                    "type": "object",
                    "required": ["Bash"],
                    "properties": {"Bash": {"type": "null"}},
                    "additionalProperties": False,
                },
                {
                    "type": "object",
                    "required": ["Python"],
                    "properties": {"Python": {"type": "null"}},
                    "additionalProperties": False,
                },
                {
                    "type": "object",
                    "required": ["Custom"],
                    "properties": {"Custom": {"$ref": "#/definitions/custom_shell"}},
                    "additionalProperties": False,
                },
            ]
        },
    },
}


def validate_script(payload: dict[str, Any]) -> None:
    jsonschema.validate(instance=payload, schema=SCRIPT_SCHEMA)
