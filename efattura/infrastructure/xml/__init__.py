"""XML parsing for FatturaPA documents."""

from efattura.infrastructure.xml.tree_parser import clean_xml, parse_xml_tree

__all__ = ["clean_xml", "parse_xml_tree"]
