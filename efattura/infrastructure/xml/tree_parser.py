"""
FatturaPA XML to typed tree.

Produces the array-preserving ``Element`` tree consumed by the
normalizer: every child is kept in a sequence even when it occurs once,
element names keep the prefix used in the source document
(``p:FatturaElettronica``) and leaf text is trimmed with internal
whitespace collapsed.
"""

import re

from lxml import etree

from efattura.config import get_logger
from efattura.core.entities.xml_node import Element, Node, Scalar
from efattura.core.exceptions import XmlParseError

logger = get_logger(__name__)

# Control characters not allowed in XML 1.0 (tab, LF and CR are kept)
_CONTROL_CHARS = r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]"
# '&' that does not start one of the predefined entities or a char reference
_STRAY_AMPERSAND = r"&(?!(?:amp|lt|gt|quot|apos|#\d+|#x[0-9A-Fa-f]+);)"
_DECLARATION = r"^\s*<\?xml[^>]*\?>"

_CONTROL_RE = re.compile(_CONTROL_CHARS)
_AMPERSAND_RE = re.compile(_STRAY_AMPERSAND)
_DECLARATION_RE = re.compile(_DECLARATION)
_CONTROL_BYTES_RE = re.compile(_CONTROL_CHARS.encode())
_AMPERSAND_BYTES_RE = re.compile(_STRAY_AMPERSAND.encode())


def clean_xml(raw: bytes | str) -> bytes | str:
    """Drop illegal control characters and escape stray ampersands.

    Works on bytes without decoding them, so the document keeps the
    encoding named in its declaration.
    """
    if isinstance(raw, bytes):
        raw = _CONTROL_BYTES_RE.sub(b"", raw)
        return _AMPERSAND_BYTES_RE.sub(b"&amp;", raw)
    raw = _CONTROL_RE.sub("", raw)
    return _AMPERSAND_RE.sub("&amp;", raw)


def _tag_name(el: etree._Element) -> str:
    local = etree.QName(el).localname
    return f"{el.prefix}:{local}" if el.prefix else local


def _normalize_text(text: str | None) -> str:
    return " ".join(text.split()) if text else ""


def _to_node(el: etree._Element) -> Node:
    # Comments and processing instructions have a non-string tag
    children = [c for c in el if isinstance(c.tag, str)]
    if not children:
        return Scalar(_normalize_text(el.text))

    grouped: dict[str, list[Node]] = {}
    for c in children:
        grouped.setdefault(_tag_name(c), []).append(_to_node(c))
    return Element(children={tag: tuple(nodes) for tag, nodes in grouped.items()})


def parse_xml_tree(raw: bytes | str, source: str | None = None) -> Element:
    """
    Parse a FatturaPA document into the typed tree.

    Args:
        raw: Document content; bytes are decoded by lxml from the
            XML declaration.
        source: Optional name of the document, reported in errors.

    Returns:
        Element whose only tag is the (prefixed) root element name.

    Raises:
        XmlParseError: If the content is not well-formed XML.
    """
    content = clean_xml(raw)
    if isinstance(content, str):
        # lxml refuses str input carrying an encoding declaration
        content = _DECLARATION_RE.sub("", content.lstrip("\ufeff"), count=1)

    parser = etree.XMLParser(resolve_entities=False, no_network=True, remove_comments=True)
    try:
        root = etree.fromstring(content, parser=parser)
    except (etree.XMLSyntaxError, ValueError) as e:
        logger.warning("xml_parse_failed", source=source, error=str(e))
        raise XmlParseError(str(e) or "empty document", source=source) from e

    tree = Element(children={_tag_name(root): (_to_node(root),)})
    logger.debug("xml_tree_parsed", source=source, root=_tag_name(root))
    return tree
