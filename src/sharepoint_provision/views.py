# -*- coding: utf-8 -*-
"""
View reconciliation.

Creates missing views with their filter, and keeps the displayed fields of
existing views in line with the declaration. The filter of an existing view
is never modified: changing a saved filter is left to a manual edit.
"""

from .monitoring import provisioning_stats
from .schema import normalize_view_query


class ViewSpec:
    """Declared state of one view on one library"""

    def __init__(self, library, name, fields, view_filter):
        self.library = library
        self.name = name
        self.fields = list(fields)
        self.filter = view_filter

    def __repr__(self):
        return f"ViewSpec({self.library!r}, {self.name!r})"

    def query(self):
        return self.filter.to_caml() if self.filter is not None else ''


def has_filter_drift(view, spec):
    """True when the live view query differs from the declared filter."""
    return normalize_view_query(view.get('ViewQuery')) != normalize_view_query(spec.query())


def ensure_view(session, spec, whatif=False):
    """
    Make sure a view exists and shows the declared fields.

    Args:
        session (SharePointSession): Connected session
        spec (ViewSpec): Declared view
        whatif (bool): Report the change without writing it

    Returns:
        str: 'created', 'updated' or 'unchanged'

    Note:
        A live filter that differs from the declared one is reported as a
        warning and left as is.
    """
    sp_list = session.get_list(spec.library)
    view = session.get_view(sp_list, spec.name)
    prefix = "[WhatIf] Would" if whatif else "[+]"

    if view is None:
        print(f"{prefix} create view '{spec.name}' on '{spec.library}'")
        if not whatif:
            session.add_view(sp_list, spec.name, spec.fields, spec.query())
        return 'created'

    if has_filter_drift(view, spec):
        provisioning_stats.stats['filter_drift_warnings'] += 1
        print(f"[!] View '{spec.name}' on '{spec.library}' has a filter that differs from the declared one; leaving it unchanged")

    if list(view.get('Fields', [])) == spec.fields:
        print(f"[OK] View '{spec.name}' on '{spec.library}' is up to date")
        return 'unchanged'

    print(f"{prefix} update fields of view '{spec.name}' on '{spec.library}': {', '.join(spec.fields)}")
    if not whatif:
        session.set_view_fields(sp_list, spec.name, spec.fields)
    return 'updated'
