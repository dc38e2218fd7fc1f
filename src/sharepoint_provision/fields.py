# -*- coding: utf-8 -*-
"""
Choice field reconciliation.

Ensures a choice field exists on a library and that its remote choices are a
superset of the declared ones. Choices are only ever added, never removed.
"""

from .errors import FieldTypeMismatchError
from .schema import replace_schema_choices

CHOICE_FIELD_TYPES = ('Choice', 'MultiChoice')


class ChoiceFieldSpec:
    """Declared state of one choice column on one library"""

    def __init__(self, library, internal_name, display_name, choices, description=None):
        self.library = library
        self.internal_name = internal_name
        self.display_name = display_name
        self.choices = list(choices)
        self.description = description

    def __repr__(self):
        return f"ChoiceFieldSpec({self.library!r}, {self.internal_name!r})"


def merge_choices(existing, desired):
    """
    Union of two choice lists, deduplicated in first-seen order.

    Existing values come first in their original order, followed by desired
    values that are not already present, in desired order.

    Examples:
        >>> merge_choices(['Diagram', 'Other'], ['Diagram', 'Runbook', 'Other'])
        ['Diagram', 'Other', 'Runbook']
    """
    merged = []
    seen = set()
    for value in list(existing) + list(desired):
        if value not in seen:
            seen.add(value)
            merged.append(value)
    return merged


def remote_choices(field):
    """Current choice values of a remote field, as an ordered list."""
    choices = field.get('Choices') or []
    if isinstance(choices, dict):
        # verbose OData wraps collections in {'results': [...]}
        choices = choices.get('results', [])
    return list(choices)


def ensure_choice_field(session, spec, whatif=False):
    """
    Make sure a choice field exists and carries every declared choice.

    Process:
        1. Resolve the library (NotFoundError propagates)
        2. Look up the field by internal name
        3. Absent: create it with the declared choices, then set the description
        4. Present but not a choice field: stop without writing
        5. Present: append missing choices by rewriting the SchemaXml CHOICES block

    Args:
        session (SharePointSession): Connected session
        spec (ChoiceFieldSpec): Declared field
        whatif (bool): Report the change without writing it

    Returns:
        str: 'created', 'updated' or 'unchanged'

    Raises:
        NotFoundError: If the library does not exist
        FieldTypeMismatchError: If the existing field is not a Choice or MultiChoice field
    """
    sp_list = session.get_list(spec.library)
    field = session.get_field(sp_list, spec.internal_name)
    prefix = "[WhatIf] Would" if whatif else "[+]"

    if field is None:
        print(f"{prefix} create field '{spec.internal_name}' on '{spec.library}' with choices: {', '.join(spec.choices)}")
        if not whatif:
            created = session.add_field(sp_list, spec.internal_name, spec.display_name, spec.choices)
            if spec.description:
                session.set_field_properties(sp_list, created, {'Description': spec.description})
        return 'created'

    field_type = field.get('TypeAsString')
    if field_type not in CHOICE_FIELD_TYPES:
        raise FieldTypeMismatchError(
            f"Field '{spec.internal_name}' on '{spec.library}' is of type '{field_type}', not a choice field; "
            "field types are never changed"
        )

    existing = remote_choices(field)
    merged = merge_choices(existing, spec.choices)

    added = [value for value in merged if value not in existing]

    if not added:
        print(f"[OK] Field '{spec.internal_name}' on '{spec.library}' is up to date")
        return 'unchanged'

    print(f"{prefix} add choices to '{spec.internal_name}' on '{spec.library}': {', '.join(added)}")
    if not whatif:
        schema_xml = replace_schema_choices(field['SchemaXml'], merged)
        session.set_field_properties(sp_list, field, {'SchemaXml': schema_xml})
    return 'updated'
