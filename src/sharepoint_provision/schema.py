# -*- coding: utf-8 -*-
"""
Field schema and view query XML helpers.

SharePoint describes fields with a CAML <Field> element (exposed as the
field's SchemaXml property) and filters views with a CAML <Where> query.
"""

import uuid
import xml.etree.ElementTree as ET


def build_choice_field_schema(internal_name, display_name, choices, field_id=None):
    """
    Build the SchemaXml of a new single-choice field.

    Args:
        internal_name (str): Internal (static) name, immutable once created
        display_name (str): Title shown to users
        choices (list): Ordered choice values
        field_id (str): Field GUID, generated when omitted

    Returns:
        str: <Field Type="Choice" ...> XML document
    """
    field_id = field_id or str(uuid.uuid4())
    field = ET.Element('Field', {
        'ID': f'{{{field_id}}}',
        'Type': 'Choice',
        'Name': internal_name,
        'StaticName': internal_name,
        'DisplayName': display_name,
        'Format': 'Dropdown',
        'FillInChoice': 'FALSE',
    })
    choices_element = ET.SubElement(field, 'CHOICES')
    for value in choices:
        ET.SubElement(choices_element, 'CHOICE').text = value
    return ET.tostring(field, encoding='unicode')


def read_schema_choices(schema_xml):
    """Return the ordered CHOICE values of a field's SchemaXml."""
    field = ET.fromstring(schema_xml)
    choices_element = field.find('CHOICES')
    if choices_element is None:
        return []
    return [choice.text or '' for choice in choices_element.findall('CHOICE')]


def replace_schema_choices(schema_xml, choices):
    """
    Rewrite the <CHOICES> block of a field's SchemaXml.

    Every existing <CHOICE> element is removed and the given values are added
    back in order. All other attributes and child elements are preserved.

    Args:
        schema_xml (str): Current SchemaXml of the field
        choices (list): Complete ordered list of choice values

    Returns:
        str: Updated SchemaXml
    """
    field = ET.fromstring(schema_xml)
    choices_element = field.find('CHOICES')
    if choices_element is None:
        choices_element = ET.SubElement(field, 'CHOICES')

    for choice in list(choices_element):
        choices_element.remove(choice)
    for value in choices:
        ET.SubElement(choices_element, 'CHOICE').text = value

    return ET.tostring(field, encoding='unicode')


class FieldEquals:
    """View filter predicate: one field equal to one literal value."""

    def __init__(self, field, value, value_type='Choice'):
        self.field = field
        self.value = value
        self.value_type = value_type

    def __eq__(self, other):
        return (isinstance(other, FieldEquals) and
                (self.field, self.value, self.value_type) == (other.field, other.value, other.value_type))

    def __repr__(self):
        return f"FieldEquals({self.field!r}, {self.value!r})"

    def to_caml(self):
        """Render the predicate as a CAML <Where> query."""
        where = ET.Element('Where')
        eq = ET.SubElement(where, 'Eq')
        ET.SubElement(eq, 'FieldRef', {'Name': self.field})
        ET.SubElement(eq, 'Value', {'Type': self.value_type}).text = self.value
        return ET.tostring(where, encoding='unicode')


def normalize_view_query(query):
    """
    Canonicalize a CAML view query for comparison.

    SharePoint stores the query without a root element and may add
    whitespace or an <OrderBy> clause; only the <Where> clause is compared.

    Returns:
        str: Canonical <Where> XML, or '' if the query has no filter
    """
    if not query or not query.strip():
        return ''
    root = ET.fromstring(f'<Query>{query}</Query>')
    where = root.find('Where')
    if where is None:
        return ''
    for element in where.iter():
        if element.text is not None:
            element.text = element.text.strip() or None
        element.tail = None
    return ET.tostring(where, encoding='unicode')
