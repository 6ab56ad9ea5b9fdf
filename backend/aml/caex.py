"""CAEX 3.0 element helpers and XML text parsing/serialization."""

from lxml import etree

CAEX_NAMESPACE = "http://www.dke.de/CAEX"
XSI_NAMESPACE = "http://www.w3.org/2001/XMLSchema-instance"
CAEX_SCHEMA_LOCATION = f"{CAEX_NAMESPACE} CAEX_ClassModel_V.3.0.xsd"

NSMAP = {
    None: CAEX_NAMESPACE,
    "xsi": XSI_NAMESPACE,
}


def caex_tag(local_name: str) -> str:
    """Create a qualified element name in the CAEX namespace."""
    return f"{{{CAEX_NAMESPACE}}}{local_name}"


def local_name(elem: etree._Element) -> str | None:
    """Return the tag without namespace, or None for comments and PIs."""
    if not isinstance(elem.tag, str):
        return None
    return etree.QName(elem).localname


def children(parent: etree._Element, name: str) -> list[etree._Element]:
    """Direct children with the given local name, in document order.

    Matching ignores namespaces so CAEX files without the default
    namespace are read the same way.
    """
    return [child for child in parent if local_name(child) == name]


def first_child(parent: etree._Element, name: str) -> etree._Element | None:
    for child in parent:
        if local_name(child) == name:
            return child
    return None


def sub_element(parent: etree._Element, name: str, **attributes: str | None) -> etree._Element:
    """Append a CAEX child, keeping attribute order and skipping None values."""
    elem = etree.SubElement(parent, caex_tag(name))
    for key, value in attributes.items():
        if value is not None:
            elem.set(key, value)
    return elem


def text_element(parent: etree._Element, name: str, text: str) -> etree._Element:
    elem = etree.SubElement(parent, caex_tag(name))
    elem.text = text
    return elem


def parse_xml(content: str | bytes) -> etree._Element:
    """Parse CAEX text into an element tree without resolving entities.

    Raises:
        etree.XMLSyntaxError: If the text is not well-formed XML.
    """
    encoding = None
    if isinstance(content, str):
        # Text is already decoded; its declared encoding no longer applies
        content = content.encode("UTF-8")
        encoding = "UTF-8"
    parser = etree.XMLParser(
        resolve_entities=False, no_network=True, dtd_validation=False, load_dtd=False,
        encoding=encoding,
    )
    return etree.fromstring(content, parser=parser)


def serialize(root: etree._Element) -> str:
    """Serialize a CAEX tree as pretty-printed UTF-8 XML text."""
    xml_bytes = etree.tostring(
        root,
        xml_declaration=True,
        encoding="UTF-8",
        pretty_print=True,
    )
    return xml_bytes.decode("UTF-8")
