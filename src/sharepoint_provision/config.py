# -*- coding: utf-8 -*-
"""
Configuration management for SharePoint provisioning.

This module reads connection settings from the environment (optionally
populated from a .env file) and the command line, and validates them before
any network call is made.
"""

import os
import sys
from dotenv import load_dotenv

from .errors import ConfigError


class Config:
    """Configuration for SharePoint provisioning runs"""

    def __init__(self, argv=None, environ=None):
        """
        Read configuration values from the environment and command line.

        Environment variables:
        1. SITE_URL - Full URL of the target site
        2. TENANT_ID - Azure AD tenant ID
        3. CLIENT_ID - App registration client ID
        4. CERT_PASSWORD - Passphrase of the PKCS#12 certificate
        5. CERT_PATH (optional) - Path to the .pfx file
        6. CERT_BASE64 (optional) - Base64-encoded .pfx content
        7. LOGIN_ENDPOINT (optional) - Azure AD endpoint (default: login.microsoftonline.com)
        8. MAX_RETRY (optional) - Max retry attempts for transient errors (default: 3)
        9. REQUEST_TIMEOUT (optional) - Per-request timeout in seconds (default: 60)
        10. WHATIF (optional) - Report changes without writing them (default: False)

        Command-line arguments:
        1. cert_path (optional) - Path to the .pfx file, takes precedence over CERT_PATH

        Args:
            argv (list): Argument vector, defaults to sys.argv
            environ (dict): Environment mapping, defaults to os.environ
        """
        argv = sys.argv if argv is None else argv
        env = os.environ if environ is None else environ

        # Required values
        self.site_url = env.get('SITE_URL', '').strip().rstrip('/')
        self.tenant_id = env.get('TENANT_ID', '').strip()
        self.client_id = env.get('CLIENT_ID', '').strip()
        self.cert_password = env.get('CERT_PASSWORD', '')

        # Certificate source: a path argument wins over the environment
        self.cert_path = argv[1] if len(argv) > 1 and argv[1] else env.get('CERT_PATH', '').strip()
        self.cert_base64 = env.get('CERT_BASE64', '').strip()

        # Optional values with defaults
        self.login_endpoint = env.get('LOGIN_ENDPOINT', '').strip() or "login.microsoftonline.com"
        self.max_retry = self._parse_int(env.get('MAX_RETRY', ''), 3, 'MAX_RETRY')
        self.request_timeout = self._parse_int(env.get('REQUEST_TIMEOUT', ''), 60, 'REQUEST_TIMEOUT')
        self.whatif = env.get('WHATIF', 'false').strip().lower() == 'true'

    @staticmethod
    def _parse_int(raw, default, name):
        if not raw or not raw.strip():
            return default
        try:
            return int(raw)
        except ValueError:
            raise ConfigError(f"{name} must be an integer, got '{raw}'")

    def validate(self):
        """
        Validate configuration values.

        Raises:
            ConfigError: If configuration is invalid
        """
        if not self.site_url:
            raise ConfigError("SITE_URL cannot be empty")
        if not self.site_url.startswith('https://'):
            raise ConfigError("SITE_URL must start with https://")
        if not self.tenant_id:
            raise ConfigError("TENANT_ID cannot be empty")
        if not self.client_id:
            raise ConfigError("CLIENT_ID cannot be empty")
        if not self.cert_password:
            raise ConfigError("CERT_PASSWORD cannot be empty")
        if not self.cert_path and not self.cert_base64:
            raise ConfigError("A certificate is required: pass a .pfx path or set CERT_PATH or CERT_BASE64")
        if self.max_retry < 0:
            raise ConfigError("MAX_RETRY must be non-negative")
        if self.request_timeout <= 0:
            raise ConfigError("REQUEST_TIMEOUT must be positive")


def parse_config(argv=None, environ=None):
    """
    Parse configuration from the environment and command-line arguments.

    A .env file in the working directory is loaded first when reading from
    the process environment; variables already set are not overridden.

    Returns:
        Config: Validated Config object

    Raises:
        ConfigError: If configuration is invalid
    """
    if environ is None:
        load_dotenv()
    config = Config(argv=argv, environ=environ)
    config.validate()
    return config
