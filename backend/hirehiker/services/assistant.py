"""
Debugging Assistant Service.

Answers candidate questions with OpenAI chat completions. The model sees the
problem description, bug tickets and API documentation up front, and pulls
source files on demand through a read_file tool backed by the session
workspace.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from hirehiker.core.config import settings
from hirehiker.core.log import get_service_logger
from hirehiker.services.llm import get_openai_client

logger = get_service_logger("assistant", "ASSISTANT")

MAX_TOOL_ITERATIONS = 10
CHAT_TEMPERATURE = 0.7
CHAT_MAX_TOKENS = 2000

EMPTY_RESPONSE_FALLBACK = "Sorry, I couldn't generate a response."
LOOP_EXHAUSTED_FALLBACK = (
    "Sorry, I encountered an issue while processing your request. Please try again."
)

READ_FILE_TOOL = {
    "type": "function",
    "function": {
        "name": "read_file",
        "description": (
            "Read the content of a file from the project. Use this to examine "
            "source code before answering questions about it."
        ),
        "parameters": {
            "type": "object",
            "properties": {
                "path": {
                    "type": "string",
                    "description": "The file path relative to project root, e.g. 'src/api/user.ts'",
                },
            },
            "required": ["path"],
        },
    },
}

FILEPATH_INSTRUCTIONS = """When suggesting code fixes, ALWAYS include the file path using this exact format:

```typescript
// filepath: src/api/user.ts
export async function updateUserProfile(...) {
  // your fixed code here
}
```

This format with the "// filepath:" comment allows the user to apply your changes directly to the editor"""


class AssistantError(Exception):
    """Raised when the chat completion could not be produced."""


@dataclass
class ProblemContext:
    """What the assistant knows about the project up front."""

    description: str
    file_tree: list[str] = field(default_factory=list)
    bug_tickets: Optional[list[dict]] = None
    swagger_spec: Optional[dict] = None


# ============== Prompt Building ==============


def format_bug_tickets(bug_tickets: Optional[list[dict]], include_related: bool = True) -> str:
    if not bug_tickets:
        return ""

    text = "\n\n## Bug Reports"
    for ticket in bug_tickets:
        text += f"\n\n### {ticket.get('id', '')}: {ticket.get('title', '')}\n{ticket.get('description', '')}"
        related = ticket.get("relatedFiles") or []
        if include_related and related:
            text += f"\n\nRelated files: {', '.join(related)}"
    return text


def format_swagger_spec(swagger_spec: Optional[dict]) -> str:
    """Render a swagger-style spec as markdown API documentation."""
    if not swagger_spec:
        return ""

    text = "\n\n## API Documentation"
    text += f"\n\n**{swagger_spec.get('title', '')}** (v{swagger_spec.get('version', '')})"
    text += f"\nBase URL: {swagger_spec.get('baseUrl', '')}"

    for endpoint in swagger_spec.get("endpoints") or []:
        text += f"\n\n### {endpoint.get('method', '')} {endpoint.get('path', '')}"
        text += f"\n{endpoint.get('summary', '')}"
        if endpoint.get("description"):
            text += f"\n{endpoint['description']}"

        parameters = endpoint.get("parameters") or []
        if parameters:
            text += "\n\n**Parameters:**"
            for param in parameters:
                required = " (required)" if param.get("required") else ""
                text += f"\n- `{param.get('name')}` ({param.get('in')}): {param.get('type')}{required}"
                if param.get("description"):
                    text += f" - {param['description']}"

        response_schema = endpoint.get("responseSchema")
        if response_schema:
            text += f"\n\n**Response:** {response_schema.get('type', '')}"
            for key, value in (response_schema.get("properties") or {}).items():
                text += f"\n- `{key}`: {value.get('type', '')}"
                if value.get("description"):
                    text += f" - {value['description']}"

    return text


def build_system_prompt(context: ProblemContext) -> str:
    file_listing = "\n".join(f"- {path}" for path in context.file_tree)

    prompt = f"""You are a helpful AI assistant helping a developer debug a software project.

You have access to the project's file structure and can read any file using the read_file tool.

## Project Structure
{file_listing}

## Problem Description
{context.description}"""

    prompt += format_bug_tickets(context.bug_tickets)
    prompt += format_swagger_spec(context.swagger_spec)

    prompt += f"""

## Instructions
- Use the read_file tool to examine source code BEFORE answering questions about specific files or code
- {FILEPATH_INSTRUCTIONS} using the "Apply" button.

- Be helpful and explain your reasoning
- Point out potential issues and suggest improvements
- Ask clarifying questions if the user's request is ambiguous"""

    return prompt


def build_files_prompt(
    description: str,
    bug_tickets: Optional[list[dict]] = None,
    project_files: Optional[list[dict]] = None,
    swagger_spec: Optional[dict] = None,
) -> str:
    """System prompt that inlines every project file (no tool access)."""
    prompt = """You are a helpful AI assistant.

The user is working on debugging a software project. Below is the context of the project they are working on."""

    prompt += f"\n\n## Problem Description\n{description}"
    prompt += format_bug_tickets(bug_tickets, include_related=False)

    if project_files:
        prompt += "\n\n## Project Code"
        for project_file in project_files:
            prompt += (
                f"\n\n### {project_file['path']}\n"
                f"```{project_file.get('language', '')}\n{project_file.get('content', '')}\n```"
            )

    prompt += format_swagger_spec(swagger_spec)
    prompt += f"\n\n## Instructions\n{FILEPATH_INSTRUCTIONS}."
    return prompt


# ============== Chat ==============


def _run_read_file(tool_call: Any, read_file: Callable[[str], Optional[str]]) -> str:
    try:
        arguments = json.loads(tool_call.function.arguments or "{}")
        path = arguments["path"]
        content = read_file(path)
    except Exception as e:
        return f"Error reading file: {e}"

    return content if content else f"File not found: {path}"


def chat(
    messages: list[dict[str, str]],
    context: ProblemContext,
    read_file: Callable[[str], Optional[str]],
) -> str:
    """
    Generate the assistant's next reply, letting the model read files.

    Args:
        messages: Transcript so far as [{"role": "user"|"assistant", "content": str}]
        context: Problem description, file tree, bug tickets, API docs
        read_file: Returns a file's content, or None when it does not exist

    Returns:
        The reply text (markdown)

    Raises:
        AssistantError: The OpenAI request failed
    """
    conversation: list[dict[str, Any]] = [{"role": "system", "content": build_system_prompt(context)}]
    conversation.extend({"role": m["role"], "content": m["content"]} for m in messages)

    for iteration in range(1, MAX_TOOL_ITERATIONS + 1):
        try:
            client = get_openai_client()
            response = client.chat.completions.create(
                model=settings.OPENAI_MODEL,
                messages=conversation,
                tools=[READ_FILE_TOOL],
                tool_choice="auto",
                temperature=CHAT_TEMPERATURE,
                max_tokens=CHAT_MAX_TOKENS,
            )
        except Exception as e:
            logger.error(f"OpenAI chat request failed: {e}")
            raise AssistantError("Failed to generate response") from e

        message = response.choices[0].message
        tool_calls = getattr(message, "tool_calls", None) or []

        if not tool_calls:
            return message.content or EMPTY_RESPONSE_FALLBACK

        logger.info(f"Iteration {iteration}: model requested {len(tool_calls)} tool call(s)")
        conversation.append(
            {
                "role": "assistant",
                "content": message.content or None,
                "tool_calls": [
                    {
                        "id": tool_call.id,
                        "type": "function",
                        "function": {
                            "name": tool_call.function.name,
                            "arguments": tool_call.function.arguments,
                        },
                    }
                    for tool_call in tool_calls
                ],
            }
        )

        for tool_call in tool_calls:
            if tool_call.function.name == "read_file":
                result = _run_read_file(tool_call, read_file)
            else:
                result = f"Unknown tool: {tool_call.function.name}"
            conversation.append({"role": "tool", "tool_call_id": tool_call.id, "content": result})

    logger.warning(f"Tool loop hit the {MAX_TOOL_ITERATIONS} iteration cap")
    return LOOP_EXHAUSTED_FALLBACK


def chat_with_files(
    messages: list[dict[str, str]],
    description: str,
    bug_tickets: Optional[list[dict]] = None,
    project_files: Optional[list[dict]] = None,
    swagger_spec: Optional[dict] = None,
) -> str:
    """Single-shot reply with every project file inlined in the prompt."""
    system_prompt = build_files_prompt(description, bug_tickets, project_files, swagger_spec)

    try:
        response = get_openai_client().chat.completions.create(
            model=settings.OPENAI_MODEL,
            messages=[{"role": "system", "content": system_prompt}, *messages],
            temperature=CHAT_TEMPERATURE,
            max_tokens=CHAT_MAX_TOKENS,
        )
    except Exception as e:
        logger.error(f"OpenAI chat request failed: {e}")
        raise AssistantError("Failed to generate response") from e

    choices = response.choices or []
    if not choices or not choices[0].message.content:
        return EMPTY_RESPONSE_FALLBACK
    return choices[0].message.content
