from hirehiker.services.code_blocks import (
    CodeSegment,
    TextSegment,
    extract_code_blocks,
    parse_code_blocks,
)


def test_plain_text_is_one_segment():
    assert parse_code_blocks("No code here.") == [TextSegment(content="No code here.")]


def test_filepath_comment_is_stripped_from_code():
    markdown = "Try this:\n```typescript\n// filepath: src/api/user.ts\nawait fetch(url);\n```\nDone."

    segments = parse_code_blocks(markdown)

    assert segments == [
        TextSegment(content="Try this:\n"),
        CodeSegment(language="typescript", filepath="src/api/user.ts", code="await fetch(url);"),
        TextSegment(content="\nDone."),
    ]


def test_bold_filepath_before_block():
    markdown = "Change this file:\n\n**src/hooks/useUserStats.ts**\n```ts\nconst a = 1;\n```"

    segments = parse_code_blocks(markdown)

    assert segments[0] == TextSegment(content="Change this file:\n\n")
    assert segments[1].filepath == "src/hooks/useUserStats.ts"


def test_inline_code_filepath_before_block():
    (block,) = extract_code_blocks("`src/api/user.ts`\n```ts\nx();\n```")

    assert block.filepath == "src/api/user.ts"
    assert block.code == "x();"


def test_bare_filepath_before_block():
    (block,) = extract_code_blocks("Intro\nsrc/components/Dashboard.tsx\n```tsx\n<div />\n```")

    assert block.filepath == "src/components/Dashboard.tsx"


def test_sentence_is_not_a_filepath():
    (block,) = extract_code_blocks("Look at user.ts for details\n```ts\nx();\n```")

    assert block.filepath is None


def test_comment_wins_over_preceding_path():
    markdown = "src/old.ts\n```ts\n// filepath: src/new.ts\nx();\n```"

    segments = parse_code_blocks(markdown)

    assert segments[-1].filepath == "src/new.ts"
    # The preceding line is kept as text because it was not used
    assert segments[0] == TextSegment(content="src/old.ts\n")


def test_missing_language_defaults_to_plaintext():
    (block,) = extract_code_blocks("```\necho hi\n```")

    assert block.language == "plaintext"
    assert block.filepath is None


def test_multiple_blocks_keep_order():
    markdown = (
        "```ts\n// filepath: a.ts\na();\n```\n"
        "and\n"
        "```ts\n// filepath: b.ts\nb();\n```"
    )

    assert [block.filepath for block in extract_code_blocks(markdown)] == ["a.ts", "b.ts"]
