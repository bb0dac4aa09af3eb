# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Conversion between XML documents and plain dicts.

Used by the XML body encoder (dict -> XML) and the XML binder (XML -> dict).
Namespaces are stripped from tag names, attributes become ``@name`` keys and
mixed text becomes ``#text``. Repeated sibling tags become lists.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Any

from ..utils.scalar import to_string


def xml_to_dict(xml_bytes: bytes, force_list: set[str] | None = None) -> dict[str, Any]:
    """Convert an XML document into a dict keyed by its root tag.

    Tags listed in ``force_list`` are always lists, even with a single child.

    Raises:
        ET.ParseError: If ``xml_bytes`` is not well-formed XML.
    """
    force_list = force_list or set()
    root = ET.fromstring(xml_bytes)
    return {_strip_ns(root.tag): _element_to_dict(root, force_list)}


def _strip_ns(tag: str) -> str:
    if tag.startswith("{"):
        return tag.split("}", 1)[1]
    return tag


def _element_to_dict(element: ET.Element, force_list: set[str]) -> dict[str, Any] | str | None:
    result: dict[str, Any] = {}

    for attr_name, attr_value in element.attrib.items():
        if attr_name.startswith("xmlns") or attr_name.startswith("{"):
            continue
        result[f"@{attr_name}"] = attr_value

    children_by_tag: dict[str, list[Any]] = {}
    for child in element:
        children_by_tag.setdefault(_strip_ns(child.tag), []).append(_element_to_dict(child, force_list))

    for tag, values in children_by_tag.items():
        if tag in force_list or len(values) > 1:
            result[tag] = values
        else:
            result[tag] = values[0]

    text = (element.text or "").strip()
    if text:
        if result:
            result["#text"] = text
        else:
            return text

    if not result:
        return None
    return result


def dict_to_xml(data: dict[str, Any]) -> bytes:
    """Convert a single-root dict to UTF-8 XML bytes with an XML declaration.

    Nested dicts become child elements, lists become repeated siblings, ``None``
    becomes an empty element, ``@name`` keys become attributes and ``#text`` the
    element text. Scalars are rendered with their canonical string form.

    Raises:
        ValueError: If ``data`` does not have exactly one top-level key.
    """
    if not isinstance(data, dict) or len(data) != 1:
        raise ValueError(
            f"dict_to_xml expects a dict with exactly one top-level key (the root element), "
            f"got {type(data).__name__} with {len(data) if isinstance(data, dict) else 'N/A'} keys"
        )

    root_tag = next(iter(data))
    root_element = _dict_to_element(str(root_tag), data[root_tag])
    return ET.tostring(root_element, encoding="utf-8", xml_declaration=True)


def _dict_to_element(tag: str, value: Any) -> ET.Element:
    element = ET.Element(tag)

    if value is None:
        pass
    elif isinstance(value, dict):
        for key, child_value in value.items():
            key = str(key)
            if key == "#text":
                element.text = to_string(child_value)
                continue
            if key.startswith("@"):
                element.set(key[1:], to_string(child_value))
                continue
            if isinstance(child_value, list):
                for item in child_value:
                    element.append(_dict_to_element(key, item))
            else:
                element.append(_dict_to_element(key, child_value))
    elif isinstance(value, list):
        for item in value:
            element.append(_dict_to_element("item", item))
    else:
        element.text = to_string(value)

    return element


__all__ = ["dict_to_xml", "xml_to_dict"]
