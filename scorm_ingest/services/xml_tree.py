"""
XML Tree Normalizer

Turns manifest XML into plain dicts: attributes merged alongside child
elements, a child occurring once kept as a scalar and one occurring several
times as a list. Callers normalize with ``to_sequence`` at each access site.
"""

import logging
from typing import Any, Dict, Union
from xml.etree.ElementTree import Element, ParseError

from defusedxml import DefusedXmlException
from defusedxml import ElementTree as DefusedET

from ..exceptions import MalformedXmlError

logger = logging.getLogger(__name__)

TEXT_KEY = "_"


def _local_name(tag: str) -> str:
    """Strip a ``{namespace-uri}`` prefix from an element or attribute name."""
    if tag.startswith("{"):
        return tag.split("}", 1)[1]
    return tag


def _merge_child(node: Dict[str, Any], key: str, value: Any) -> None:
    existing = node.get(key)
    if key not in node:
        node[key] = value
    elif isinstance(existing, list):
        existing.append(value)
    else:
        node[key] = [existing, value]


def _normalize(element: Element) -> Union[str, Dict[str, Any]]:
    text = (element.text or "").strip()
    children = list(element)

    if not element.attrib and not children:
        return text

    node: Dict[str, Any] = {}
    for name, value in element.attrib.items():
        node[_local_name(name)] = value
    attribute_keys = set(node)

    for child in children:
        key = _local_name(child.tag)
        # an element sharing its name with an attribute goes under "name_"
        if key in attribute_keys:
            key = f"{key}_"
        _merge_child(node, key, _normalize(child))

    if text:
        node[TEXT_KEY] = text
    return node


def parse_xml(source: Union[str, bytes]) -> Dict[str, Any]:
    """
    Parse an XML document into a normalized tree

    Args:
        source: XML document as text or raw bytes

    Returns:
        ``{root_name: normalized_root}``

    Raises:
        MalformedXmlError: If the document is not well-formed, or uses
            entity declarations refused by defusedxml
    """
    try:
        root = DefusedET.fromstring(source)
    except ParseError as e:
        raise MalformedXmlError(str(e)) from e
    except DefusedXmlException as e:
        raise MalformedXmlError(f"forbidden XML construct ({e})") from e

    root_name = _local_name(root.tag)
    logger.debug("Parsed XML document with root <%s>", root_name)
    return {root_name: _normalize(root)}
