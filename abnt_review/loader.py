"""
Document Loader Module
Reads a Word-exported HTML file and parses its embedded stylesheet.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from bs4 import BeautifulSoup, NavigableString

logger = logging.getLogger(__name__)

# Word saves "Web Page" exports in the Windows ANSI code page
DEFAULT_ENCODING = 'windows-1252'

HTML_PARSER = 'lxml'

RULE_PATTERN = re.compile(r'([^{]+)\{([^}]*)\}')
CSS_COMMENT_PATTERN = re.compile(r'/\*.*?\*/', re.DOTALL)


def parse_declarations(declarations: str) -> Dict[str, str]:
    """
    Parse a CSS declaration block ("font-size:12.0pt; line-height:150%")
    into a property map. Declarations without a value are dropped.
    """
    props = {}
    for declaration in declarations.split(';'):
        if ':' not in declaration:
            continue
        key, value = declaration.split(':', 1)
        key = key.strip()
        value = value.strip()
        if key and value:
            props[key] = value
    return props


class StyleSheet:
    """
    Selector -> property map built from a document's <style> blocks.

    Comma-joined selectors are split; every selector accumulates a
    right-biased merge of the property bags declared for it.
    """

    def __init__(self, rules: Optional[Dict[str, Dict[str, str]]] = None):
        self._rules = rules or {}

    @classmethod
    def parse(cls, css: str) -> 'StyleSheet':
        css = CSS_COMMENT_PATTERN.sub('', css)
        css = css.replace('<!--', '').replace('-->', '')

        rules: Dict[str, Dict[str, str]] = {}
        for match in RULE_PATTERN.finditer(css):
            selector_group = match.group(1).strip()
            props = parse_declarations(match.group(2))

            for selector in selector_group.split(','):
                selector = selector.strip()
                if not selector:
                    continue
                merged = dict(rules.get(selector, {}))
                merged.update(props)
                rules[selector] = merged

        return cls(rules)

    @classmethod
    def from_soup(cls, soup: BeautifulSoup) -> 'StyleSheet':
        css = '\n'.join(
            str(text)
            for style in soup.find_all('style')
            for text in style.contents
            if isinstance(text, NavigableString)
        )
        return cls.parse(css)

    def get(self, selector: str, property_name: str) -> Optional[str]:
        rule = self._rules.get(selector)
        if not rule:
            return None
        return rule.get(property_name) or None

    def __contains__(self, selector: str) -> bool:
        return selector in self._rules

    def __len__(self) -> int:
        return len(self._rules)

    @property
    def selectors(self):
        return list(self._rules)


@dataclass
class LoadedDocument:
    """Parsed markup tree plus its stylesheet."""
    soup: BeautifulSoup
    stylesheet: StyleSheet
    source_path: Optional[str] = None


def load_html(html: str, source_path: Optional[str] = None) -> LoadedDocument:
    soup = BeautifulSoup(html, HTML_PARSER)
    stylesheet = StyleSheet.from_soup(soup)
    logger.debug("Parsed stylesheet with %d selectors", len(stylesheet))
    return LoadedDocument(soup=soup, stylesheet=stylesheet, source_path=source_path)


def load_document(file_path: str, encoding: str = DEFAULT_ENCODING) -> LoadedDocument:
    """
    Load a Word HTML export from disk.

    Args:
        file_path: Path to .htm/.html file
        encoding: Character encoding of the file

    Returns:
        LoadedDocument

    Raises:
        FileNotFoundError: If the file does not exist
    """
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")

    html = path.read_bytes().decode(encoding, errors='replace')
    logger.info("Loaded %s (%d characters)", path.name, len(html))
    return load_html(html, source_path=str(path))
