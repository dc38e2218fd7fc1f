# -*- coding: utf-8 -*-
"""
Declared columns and views for the document libraries.

This table is the source of truth for every provisioning run. Entries are
never deleted remotely: removing an entry here only stops it from being
reconciled. Renames and deletions have to be done in SharePoint directly.
"""

from .fields import ChoiceFieldSpec
from .schema import FieldEquals
from .views import ViewSpec

ARCHITECTURE = "Architecture Documents"
ENGINEERING = "Engineering Documents"
OPERATIONS = "Operations Documents"

LIBRARIES = [ARCHITECTURE, ENGINEERING, OPERATIONS]

DOCUMENT_TYPE = "DocumentType"
REVIEW_STATUS = "ReviewStatus"

# Columns shown by every generated view
BASE_VIEW_FIELDS = ["DocIcon", "LinkFilename", DOCUMENT_TYPE, "Modified", "Editor"]


FIELD_SPECS = [
    ChoiceFieldSpec(
        ARCHITECTURE, DOCUMENT_TYPE, "Document Type",
        ["Diagram", "Decision Record", "Standard", "Reference", "Other"],
        description="Kind of architecture document"
    ),
    ChoiceFieldSpec(
        ARCHITECTURE, REVIEW_STATUS, "Review Status",
        ["Draft", "In Review", "Approved", "Superseded"],
        description="Architecture board review state"
    ),
    ChoiceFieldSpec(
        ENGINEERING, DOCUMENT_TYPE, "Document Type",
        ["Design", "Specification", "Test Plan", "Release Note", "Other"],
        description="Kind of engineering document"
    ),
    ChoiceFieldSpec(
        OPERATIONS, DOCUMENT_TYPE, "Document Type",
        ["Runbook", "Procedure", "Incident Report", "Other"],
        description="Kind of operations document"
    ),
]


VIEW_SPECS = [
    # Architecture
    ViewSpec(ARCHITECTURE, "Diagrams", BASE_VIEW_FIELDS + [REVIEW_STATUS],
             FieldEquals(DOCUMENT_TYPE, "Diagram")),
    ViewSpec(ARCHITECTURE, "Decision Records", BASE_VIEW_FIELDS + [REVIEW_STATUS],
             FieldEquals(DOCUMENT_TYPE, "Decision Record")),
    ViewSpec(ARCHITECTURE, "Standards", BASE_VIEW_FIELDS + [REVIEW_STATUS],
             FieldEquals(DOCUMENT_TYPE, "Standard")),
    ViewSpec(ARCHITECTURE, "Approved", BASE_VIEW_FIELDS,
             FieldEquals(REVIEW_STATUS, "Approved")),
    # Engineering
    ViewSpec(ENGINEERING, "Designs", BASE_VIEW_FIELDS,
             FieldEquals(DOCUMENT_TYPE, "Design")),
    ViewSpec(ENGINEERING, "Specifications", BASE_VIEW_FIELDS,
             FieldEquals(DOCUMENT_TYPE, "Specification")),
    ViewSpec(ENGINEERING, "Test Plans", BASE_VIEW_FIELDS,
             FieldEquals(DOCUMENT_TYPE, "Test Plan")),
    # Operations
    ViewSpec(OPERATIONS, "Runbooks", BASE_VIEW_FIELDS,
             FieldEquals(DOCUMENT_TYPE, "Runbook")),
    ViewSpec(OPERATIONS, "Procedures", BASE_VIEW_FIELDS,
             FieldEquals(DOCUMENT_TYPE, "Procedure")),
    ViewSpec(OPERATIONS, "Incident Reports", BASE_VIEW_FIELDS,
             FieldEquals(DOCUMENT_TYPE, "Incident Report")),
]
