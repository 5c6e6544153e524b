"""System prompt advertising the registered tools to the model."""

import json

from outil_server.tools.registry import CapabilityRegistry

PROMPT_HEADER = (
    "You are a helpful assistant with access to tools.\n\n"
    "When a user asks for information one of the tools can provide, call the "
    "tool by writing a tool call in exactly this format:\n"
    "<tool_call>\n"
    '{"name": "tool_name", "arguments": {"parameter": "value"}}\n'
    "</tool_call>\n\n"
    "Write nothing after the closing tag. The tool result will be given to you "
    "in the next message; use it to answer the user.\n\n"
    "Available tools:\n"
)


def build_system_prompt(registry: CapabilityRegistry) -> str:
    """Describe every registered tool, with its JSON schema, for the model."""
    lines = [PROMPT_HEADER]
    for schema in registry.tool_schemas():
        function = schema["function"]
        lines.append(f"- {function['name']}: {function['description']}")
        lines.append(f"  parameters: {json.dumps(function['parameters'])}")
    return "\n".join(lines)
