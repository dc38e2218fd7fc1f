# -*- coding: utf-8 -*-
"""
Shared utility functions for SharePoint provisioning.

This module provides common helper functions used across multiple modules.
"""

import os


def is_env_flag_set(name, default='false'):
    """
    Check whether a boolean environment flag is set to 'true'.

    Args:
        name (str): Environment variable name
        default (str): Value assumed when the variable is not set

    Returns:
        bool: True if the variable equals 'true' (case-insensitive)
    """
    return os.environ.get(name, default).strip().lower() == 'true'


def is_debug_enabled():
    """
    Check if debug mode is enabled via DEBUG environment variable.

    Returns:
        bool: True if debug mode is enabled, False otherwise
    """
    return is_env_flag_set('DEBUG')


def odata_quote(value):
    """Escape a string literal for use inside an OData URL segment."""
    return value.replace("'", "''")
