"""
Flat XML documents used by the V2 protocol:

    <xml><return_code><![CDATA[SUCCESS]]></return_code>...</xml>
"""

from typing import Dict, Mapping, Optional
from xml.etree import ElementTree


def to_xml(parameters: Mapping[str, Optional[str]]) -> str:
    parts = ["<xml>"]
    for name, value in parameters.items():
        if value is None or value == "":
            continue
        text = str(value).replace("]]>", "]]]]><![CDATA[>")
        parts.append(f"<{name}><![CDATA[{text}]]></{name}>")
    parts.append("</xml>")
    return "".join(parts)


def from_xml(body: str) -> Dict[str, str]:
    """
    Parse a flat V2 document into a parameter dict.

    Raises:
        ValueError: body is empty, malformed, or not rooted at <xml>
    """
    if not body or not body.strip():
        raise ValueError("empty XML body")

    try:
        root = ElementTree.fromstring(body)
    except ElementTree.ParseError as e:
        raise ValueError(f"malformed XML: {e}") from e

    if root.tag != "xml":
        raise ValueError(f"unexpected root element <{root.tag}>")

    return {child.tag: (child.text or "") for child in root}
