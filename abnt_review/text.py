"""
Text extraction with light inline-emphasis markers.
"""

from bs4 import Tag
from bs4.element import Comment, NavigableString

BOLD_TAGS = {'b', 'strong'}
ITALIC_TAGS = {'i', 'em'}


def extract_text(element: Tag) -> str:
    """
    Flatten an element's content tree into plain text.

    Bold runs become **text**, italic runs become _text_, every other
    element is unwrapped. Non-breaking spaces are normalised and each
    level of the result is trimmed.
    """
    parts = []

    for child in element.children:
        if isinstance(child, Comment):
            continue
        if isinstance(child, NavigableString):
            parts.append(str(child).replace('\u00a0', ' '))
        elif isinstance(child, Tag):
            name = (child.name or '').lower()
            inner = extract_text(child)
            if name in BOLD_TAGS:
                parts.append(f"**{inner}**")
            elif name in ITALIC_TAGS:
                parts.append(f"_{inner}_")
            else:
                parts.append(inner)

    return ''.join(parts).strip()
