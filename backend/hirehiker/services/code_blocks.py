"""
Code block extraction for assistant replies.

Splits markdown into text and fenced code segments, and works out which
project file each code block targets so the editor can offer "Apply".
The filepath is recognised in any of these layouts:

    ```typescript
    // filepath: src/api/user.ts
    ...
    ```

    src/api/user.ts          `src/api/user.ts`          **src/api/user.ts**
    ```typescript            ```typescript              ```typescript
    ...                      ...                        ...
    ```                      ```                        ```
"""

import re
from typing import Literal, Optional, Union

from pydantic import BaseModel

CODE_BLOCK_PATTERN = re.compile(r"```(\w*)\n([\s\S]*?)```")
FILEPATH_COMMENT_PATTERN = re.compile(r"^//\s*filepath:\s*(.+)\n")
FILEPATH_BEFORE_BLOCK_PATTERN = re.compile(
    r"(?:^|\n)(?:\*\*)?`?([a-zA-Z0-9_\-./]+\.[a-zA-Z0-9]+)`?(?:\*\*)?\s*\n\Z"
)


class TextSegment(BaseModel):
    type: Literal["text"] = "text"
    content: str


class CodeSegment(BaseModel):
    type: Literal["code"] = "code"
    language: str
    filepath: Optional[str] = None
    code: str


Segment = Union[TextSegment, CodeSegment]


def parse_code_blocks(markdown: str) -> list[Segment]:
    """Split markdown into ordered text and code segments."""
    segments: list[Segment] = []
    last_index = 0

    for match in CODE_BLOCK_PATTERN.finditer(markdown):
        text_before = markdown[last_index:match.start()]
        language = match.group(1) or "plaintext"
        code = match.group(2)
        filepath: Optional[str] = None

        comment_match = FILEPATH_COMMENT_PATTERN.match(code)
        if comment_match:
            filepath = comment_match.group(1).strip()
            code = code[comment_match.end():]

        if filepath is None and text_before:
            before_match = FILEPATH_BEFORE_BLOCK_PATTERN.search(text_before)
            if before_match:
                filepath = before_match.group(1).strip()
                text_before = FILEPATH_BEFORE_BLOCK_PATTERN.sub("\n", text_before, count=1)

        if text_before.strip():
            segments.append(TextSegment(content=text_before))

        segments.append(CodeSegment(language=language, filepath=filepath, code=code.strip()))
        last_index = match.end()

    trailing = markdown[last_index:]
    if trailing.strip():
        segments.append(TextSegment(content=trailing))

    return segments


def extract_code_blocks(markdown: str) -> list[CodeSegment]:
    """Only the code segments of a reply, in order."""
    return [segment for segment in parse_code_blocks(markdown) if isinstance(segment, CodeSegment)]
