"""Normalization of identity values for display.

Attribute values are opaque to the admin pages. Values that can render
themselves (``to_display()``) or are XML elements are serialized to text; all
other values pass through unchanged.
"""

from typing import Any, Dict, List, Mapping, Sequence

from lxml import etree


def _is_element_list(value: Any) -> bool:
    return (
        isinstance(value, (list, tuple))
        and len(value) > 0
        and all(isinstance(item, etree._Element) for item in value)
    )


def serialize_for_display(value: Any) -> Any:
    """Return the displayable form of one identity value.

    Args:
        value: Scalar, XML element, list of XML elements, or an object with a
            ``to_display()`` method

    Returns:
        Serialized text for structured values, ``value`` itself for scalars

    Example:
        >>> serialize_for_display("Tim")
        'Tim'
        >>> serialize_for_display(NameID(value="abc")).startswith("<saml:NameID")
        True
    """
    to_display = getattr(value, "to_display", None)
    if callable(to_display):
        return str(to_display())
    if isinstance(value, etree._Element):
        return etree.tostring(value, encoding="unicode")
    if _is_element_list(value):
        return "".join(etree.tostring(item, encoding="unicode") for item in value)
    return value


def normalize_attributes(attributes: Mapping[str, Sequence[Any]]) -> Dict[str, List[Any]]:
    """Serialize every attribute value, keeping attribute and value order."""
    return {
        name: [serialize_for_display(value) for value in values]
        for name, values in attributes.items()
    }
