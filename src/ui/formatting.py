"""Rich-text and time formatting for chat bubbles."""

import re
from datetime import datetime

from src.chat.actions import ActionKind, parse_action
from src.models.schemas import QuickOption

_UL_ITEM = re.compile(r"^[-*]\s+")
_OL_ITEM = re.compile(r"^\d+\.\s+")
_LINK = re.compile(r"\[([^\]]+)\]\(([^)\s]+)\)")
_SAFE_SCHEMES = ("http://", "https://", "tel:", "mailto:")


def _render_link(match: re.Match[str]) -> str:
    label, url = match.group(1), match.group(2)
    if not url.lower().startswith(_SAFE_SCHEMES):
        return match.group(0)
    return (
        f'<a href="{url}" class="text-red-700 underline" target="_blank" '
        f'rel="noopener noreferrer">{label}</a>'
    )


def _wrap_list_items(text: str, item: re.Pattern[str], tag: str, classes: str) -> str:
    """Group consecutive lines matching ``item`` into one HTML list."""
    result: list[str] = []
    in_list = False
    for line in text.split("\n"):
        stripped = line.strip()
        if item.match(stripped):
            if not in_list:
                result.append(f'<{tag} class="{classes}">')
                in_list = True
            result.append(f"<li>{item.sub('', stripped)}</li>")
            continue
        if in_list:
            result.append(f"</{tag}>")
            in_list = False
        result.append(line)
    if in_list:
        result.append(f"</{tag}>")
    return "\n".join(result)


def markdown_to_html(text: str) -> str:
    """Convert a message body to HTML for display.

    Supports: bold, italic, inline code, code blocks, links, lists.
    Raw HTML in the body is escaped, quotes included.
    """
    text = (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&#x27;")
    )

    text = re.sub(
        r"```(\w*)\n?([\s\S]*?)```",
        r'<pre class="bg-gray-800 text-gray-100 rounded-lg p-3 my-2 overflow-x-auto text-xs">'
        r"<code>\2</code></pre>",
        text,
    )
    text = re.sub(
        r"`([^`]+)`",
        r'<code class="bg-gray-200 text-red-600 px-1.5 py-0.5 rounded text-xs">\1</code>',
        text,
    )

    text = re.sub(r"\*\*(.+?)\*\*", r"<strong>\1</strong>", text)
    text = re.sub(r"__(.+?)__", r"<strong>\1</strong>", text)
    text = re.sub(r"(?<![\w*])\*([^*\n]+)\*", r"<em>\1</em>", text)
    text = re.sub(r"(?<!\w)_([^_\n]+)_(?!\w)", r"<em>\1</em>", text)

    # Only http(s), tel and mailto targets become links
    text = _LINK.sub(_render_link, text)

    text = _wrap_list_items(text, _UL_ITEM, "ul", "list-disc list-inside my-2 space-y-1")
    text = _wrap_list_items(text, _OL_ITEM, "ol", "list-decimal list-inside my-2 space-y-1")

    return text.replace("\n", "<br>")


def format_time(value: datetime) -> str:
    """Local wall-clock time, e.g. ``09:41 AM``."""
    return value.astimezone().strftime("%I:%M %p")


def option_prefix(option: QuickOption) -> str:
    """Icon prefix for a quick-option button."""
    if option.link:
        return "🔗 "
    parsed = parse_action(option.action) if option.action else None
    if parsed is None:
        return ""
    return "📞 " if parsed.kind is ActionKind.CALL else "🎁 "
