"""
Style Cascade Resolver Module
Resolves the effective value of a tracked CSS property for one element.

Word exports declare formatting in three places: the element's inline
style, class rules in the <style> block, and inline styles on the <span>
runs inside a paragraph. Resolution searches them in that order and then
walks up the ancestor chain.
"""

from dataclasses import dataclass, asdict
from typing import Dict, List, Optional

from bs4 import BeautifulSoup, Tag

from .loader import StyleSheet, parse_declarations

TRACKED_PROPERTIES = (
    'font-size',
    'line-height',
    'font-family',
    'text-align',
    'text-indent',
    'margin-top',
    'margin-bottom',
    'margin-left',
)

# Guards the upward walk against pathologically nested markup
MAX_ANCESTOR_DEPTH = 256


@dataclass(frozen=True)
class ResolvedStyle:
    """Raw resolved values of the tracked properties (None when absent)."""
    font_size: Optional[str] = None
    line_height: Optional[str] = None
    font_family: Optional[str] = None
    text_align: Optional[str] = None
    text_indent: Optional[str] = None
    margin_top: Optional[str] = None
    margin_bottom: Optional[str] = None
    margin_left: Optional[str] = None

    @classmethod
    def from_properties(cls, props: Dict[str, Optional[str]]) -> 'ResolvedStyle':
        return cls(**{_field_name(name): value for name, value in props.items()})

    def get(self, property_name: str) -> Optional[str]:
        return getattr(self, _field_name(property_name))

    def to_dict(self) -> Dict[str, Optional[str]]:
        return asdict(self)


def _field_name(property_name: str) -> str:
    return property_name.replace('-', '_')


def _is_element(node) -> bool:
    return isinstance(node, Tag) and not isinstance(node, BeautifulSoup)


def class_tokens(element: Tag) -> List[str]:
    classes = element.get('class') or []
    if isinstance(classes, str):
        classes = classes.split()
    return list(classes)


def inline_style(element: Tag) -> Dict[str, str]:
    return parse_declarations(element.get('style') or '')


class StyleResolver:
    """Upward, span-aware style search over a parsed stylesheet."""

    def __init__(self, stylesheet: StyleSheet, max_depth: int = MAX_ANCESTOR_DEPTH):
        self.stylesheet = stylesheet
        self.max_depth = max_depth

    def class_style(self, element: Tag, property_name: str) -> Optional[str]:
        """Look up tag.class, then .class, then the bare tag selector."""
        tag = element.name.lower()
        classes = class_tokens(element)

        selectors = [f"{tag}.{cls}" for cls in classes]
        selectors += [f".{cls}" for cls in classes]
        selectors.append(tag)

        for selector in selectors:
            value = self.stylesheet.get(selector, property_name)
            if value:
                return value
        return None

    def own_style(self, element: Tag, property_name: str) -> Optional[str]:
        value = inline_style(element).get(property_name)
        if value:
            return value
        return self.class_style(element, property_name)

    def resolve(self, element: Tag, property_name: str) -> Optional[str]:
        """
        Resolve one property for one element.

        Args:
            element: Element to resolve for
            property_name: CSS property name, e.g. 'font-size'

        Returns:
            Raw value string, or None when no source declares it
        """
        node = element
        depth = 0

        while _is_element(node) and depth <= self.max_depth:
            value = self.own_style(node, property_name)
            if value:
                return value

            span = node.find('span')
            if span is not None:
                value = self.own_style(span, property_name)
                if value:
                    return value

            node = node.parent
            depth += 1

        return None

    def resolve_all(self, element: Tag) -> ResolvedStyle:
        return ResolvedStyle.from_properties({
            name: self.resolve(element, name) for name in TRACKED_PROPERTIES
        })
