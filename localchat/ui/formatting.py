"""Message formatting for the chat page.

Splits assistant replies into prose and fenced code blocks, tags each code
block with a language, and converts prose markdown to HTML.
"""

import html
import re
from typing import Literal, NamedTuple

CODE_FENCE = re.compile(r"```(?:([\w+-]+)[^\S\n]*\n)?\n?([\s\S]*?)(?:```|\Z)")
LINK = re.compile(r"\[([^\]]+)\]\(([^)\s]+)\)")
SAFE_LINK_SCHEMES = ("http://", "https://", "mailto:")


class Segment(NamedTuple):
    """A run of message text.

    Attributes:
        kind: "text" for prose, "code" for a fenced block.
        content: The text itself, without fences.
        language: Language tag for code segments, None for prose.
    """

    kind: Literal["text", "code"]
    content: str
    language: str | None = None


def guess_language(code: str) -> str:
    """Guess a highlight language for an untagged code block."""
    if "<" in code:
        return "html"
    if "{" in code:
        return "javascript"
    if "[" in code:
        return "json"
    return "plaintext"


def split_code_blocks(text: str) -> list[Segment]:
    """Split a message into prose and fenced code segments.

    An unterminated fence (common mid-stream) runs to the end of the text.

    Args:
        text: Raw message content.

    Returns:
        Segments in original order. Blank prose between blocks is dropped.
    """
    segments: list[Segment] = []
    position = 0

    for match in CODE_FENCE.finditer(text):
        prose = text[position:match.start()]
        if prose.strip():
            segments.append(Segment("text", prose))
        code = match.group(2).rstrip("\n")
        language = (match.group(1) or "").lower() or guess_language(code)
        segments.append(Segment("code", code, language))
        position = match.end()

    tail = text[position:]
    if tail.strip():
        segments.append(Segment("text", tail))
    return segments


def _wrap_lists(text: str, item_pattern: str, open_tag: str, close_tag: str) -> str:
    lines = text.split("\n")
    in_list = False
    result = []
    for line in lines:
        stripped = line.strip()
        if re.match(item_pattern, stripped):
            if not in_list:
                result.append(open_tag)
                in_list = True
            item = re.sub(item_pattern, "", stripped)
            result.append(f"<li>{item}</li>")
        else:
            if in_list:
                result.append(close_tag)
                in_list = False
            result.append(line)
    if in_list:
        result.append(close_tag)
    return "\n".join(result)


def _render_link(match: re.Match[str]) -> str:
    label, url = match.groups()
    if not url.lower().startswith(SAFE_LINK_SCHEMES):
        return match.group(0)
    return f'<a href="{url}" class="text-blue-600 underline" target="_blank">{label}</a>'


def markdown_to_html(text: str) -> str:
    """Convert prose markdown to HTML for chat display.

    Supports: bold, italic, inline code, links, lists. Code fences are
    handled by split_code_blocks before this is called.
    """
    # Escape HTML entities first, quotes included since links become attributes
    text = html.escape(text)

    text = re.sub(
        r"`([^`]+)`",
        r'<code class="bg-gray-200 text-pink-600 px-1.5 py-0.5 rounded text-xs">\1</code>',
        text,
    )

    text = re.sub(r"\*\*(.+?)\*\*", r"<strong>\1</strong>", text)
    text = re.sub(r"__(.+?)__", r"<strong>\1</strong>", text)

    text = re.sub(r"(?<![\w*])\*([^*\n]+)\*(?![\w*])", r"<em>\1</em>", text)
    text = re.sub(r"(?<![\w_])_([^_\n]+)_(?![\w_])", r"<em>\1</em>", text)

    text = LINK.sub(_render_link, text)

    text = _wrap_lists(
        text, r"^[-*]\s+", '<ul class="list-disc list-inside my-2 space-y-1">', "</ul>"
    )
    text = _wrap_lists(
        text, r"^\d+\.\s+", '<ol class="list-decimal list-inside my-2 space-y-1">', "</ol>"
    )

    return text.strip("\n").replace("\n", "<br>")
