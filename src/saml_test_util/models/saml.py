"""Data models for SAML identity values.

This module defines the NameID identifier released by identity providers. The
admin pages treat it as an opaque value: they only ask it to render itself.
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from lxml import etree

# SAML 2.0 namespace
SAML_NS = "urn:oasis:names:tc:SAML:2.0:assertion"

NAMEID_FORMAT_UNSPECIFIED = "urn:oasis:names:tc:SAML:1.1:nameid-format:unspecified"
NAMEID_FORMAT_TRANSIENT = "urn:oasis:names:tc:SAML:2.0:nameid-format:transient"
NAMEID_FORMAT_PERSISTENT = "urn:oasis:names:tc:SAML:2.0:nameid-format:persistent"

# Element attribute name for each optional NameID field
_XML_ATTRIBUTES = (
    ("name_qualifier", "NameQualifier"),
    ("sp_name_qualifier", "SPNameQualifier"),
    ("format", "Format"),
    ("sp_provided_id", "SPProvidedID"),
)


@dataclass(frozen=True)
class NameID:
    """SAML 2.0 NameID.

    Attributes:
        value: Identifier value
        format: NameID format URI
        name_qualifier: Qualifier of the asserting party
        sp_name_qualifier: Qualifier of the relying party
        sp_provided_id: Alternative identifier set by the service provider

    Example:
        >>> name_id = NameID(value="_b806c4f9", format=NAMEID_FORMAT_TRANSIENT)
        >>> name_id.to_display().startswith("<saml:NameID")
        True
    """

    value: str
    format: Optional[str] = None
    name_qualifier: Optional[str] = None
    sp_name_qualifier: Optional[str] = None
    sp_provided_id: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.value or not isinstance(self.value, str):
            raise ValueError(
                f"NameID value must be a non-empty string, got: {self.value!r}"
            )

    def to_xml(self) -> etree._Element:
        """Build the ``<saml:NameID>`` element."""
        attrib = {
            xml_name: getattr(self, field_name)
            for field_name, xml_name in _XML_ATTRIBUTES
            if getattr(self, field_name)
        }
        element = etree.Element(f"{{{SAML_NS}}}NameID", nsmap={"saml": SAML_NS}, attrib=attrib)
        element.text = self.value
        return element

    def to_display(self) -> str:
        """Serialize to the XML text shown on the status page."""
        return etree.tostring(self.to_xml(), encoding="unicode")

    def to_dict(self) -> Dict[str, Any]:
        """Plain dict suitable for storing in a JSON-backed session."""
        return {key: value for key, value in asdict(self).items() if value is not None}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NameID":
        return cls(
            value=data["value"],
            format=data.get("format"),
            name_qualifier=data.get("name_qualifier"),
            sp_name_qualifier=data.get("sp_name_qualifier"),
            sp_provided_id=data.get("sp_provided_id"),
        )
