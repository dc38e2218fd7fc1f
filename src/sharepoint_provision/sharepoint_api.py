# -*- coding: utf-8 -*-
"""
SharePoint REST API operations for provisioning.

This module opens the authenticated session used by the reconcilers and
provides the list, field and view operations they rely on, together with the
request retry logic.

Uses direct SharePoint REST (_api) calls because views and field SchemaXml are
not exposed by Microsoft Graph.
"""

import time
from urllib.parse import urlparse

import requests

from .auth import acquire_token, load_certificate_credential
from .errors import (
    AuthError, ConfigError, NotFoundError, RemoteRequestError, RemoteWriteError, SiteConnectionError
)
from .monitoring import rate_monitor
from .schema import build_choice_field_schema
from .utils import is_debug_enabled, odata_quote

# SP.AddFieldOptions.addFieldInternalNameHint: keep the Name attribute as the internal name.
# addFieldToDefaultView (16) is not set: new fields stay out of the default view.
ADD_FIELD_INTERNAL_NAME_HINT = 8

VERBOSE_JSON = 'application/json;odata=verbose'


def make_request_with_retry(http, method, url, headers=None, json_data=None, params=None,
                            max_retries=3, timeout=60, retry_transient=True):
    """
    Make a SharePoint request with retry handling for transient errors.
    Includes rate limiting monitoring via response header analysis.

    Retry Logic:
        - 429 (Rate Limit): Waits for Retry-After header duration
        - 5xx (Server Error): Exponential backoff (2s, 3s, 5s)
        - Network errors: Exponential backoff (2s, 3s, 5s)
        - 4xx (Client Error): No retry

    With retry_transient=False only 429 is retried: a 5xx or network error
    leaves the outcome of the request unknown, so it is returned or raised
    on the first attempt. Writes use this mode.

    Args:
        http (requests.Session): HTTP session carrying the Authorization header
        method (str): HTTP method ('GET' or 'POST')
        url (str): Full REST endpoint URL
        headers (dict): Extra request headers
        json_data (dict): JSON body for POST requests
        params (dict): URL parameters
        max_retries (int): Maximum number of retry attempts (default: 3)
        timeout (int): Per-request timeout in seconds
        retry_transient (bool): Retry 5xx responses and network errors

    Returns:
        requests.Response: The last HTTP response. When 429/5xx retries are
        exhausted, the failing response is returned for the caller to report.

    Raises:
        requests.exceptions.RequestException: If network errors exhaust all retries
    """
    is_write = method.upper() != 'GET'

    for attempt in range(max_retries + 1):
        try:
            # Add proactive delay if approaching rate limits
            if rate_monitor.should_slow_down() and attempt > 0:
                delay = 2 ** attempt
                if is_debug_enabled():
                    print(f"[⚠] Proactive rate limiting delay: {delay}s")
                time.sleep(delay)

            if is_debug_enabled():
                print(f"[DEBUG] {method.upper()} {url}")

            response = http.request(method.upper(), url, headers=headers, json=json_data,
                                    params=params, timeout=timeout)
            rate_monitor.analyze_response(response, is_write=is_write)

            if response.status_code == 429:
                retry_after = response.headers.get('Retry-After', '60')
                try:
                    wait_seconds = int(retry_after)
                except ValueError:
                    wait_seconds = 60  # Default to 60 seconds if header is malformed

                if attempt < max_retries:
                    print(f"[!] Rate limited (429). Waiting {wait_seconds} seconds before retry {attempt + 1}/{max_retries}...")
                    time.sleep(wait_seconds)
                    continue
                print(f"[!] Rate limiting exhausted all retries")
                return response

            elif 500 <= response.status_code < 600:
                if not retry_transient:
                    return response
                if attempt < max_retries:
                    wait_seconds = (2 ** attempt) + 1
                    print(f"[!] Server error ({response.status_code}). Retrying in {wait_seconds} seconds... ({attempt + 1}/{max_retries})")
                    if is_debug_enabled():
                        print(f"[DEBUG] Server error response: {response.text[:300]}")
                    time.sleep(wait_seconds)
                    continue
                print(f"[!] Server errors exhausted all retries")
                return response

            # Success or client error (don't retry client errors like 400, 401, 403, 404)
            return response

        except requests.exceptions.RequestException as e:
            if not retry_transient:
                raise
            if attempt < max_retries:
                wait_seconds = (2 ** attempt) + 1
                print(f"[!] Network error: {e}. Retrying in {wait_seconds} seconds... ({attempt + 1}/{max_retries})")
                time.sleep(wait_seconds)
                continue
            print(f"[!] Network errors exhausted all retries: {e}")
            raise

    # Should never reach here, but just in case
    raise RemoteRequestError("Unexpected error in make_request_with_retry")


def extract_error_message(response):
    """
    Pull the human-readable message out of a SharePoint error response.

    Handles both the verbose ('error') and the nometadata ('odata.error')
    error shapes, falling back to the raw body.
    """
    try:
        body = response.json()
    except ValueError:
        return response.text[:300]

    error = body.get('odata.error') or body.get('error') or {}
    message = error.get('message')
    if isinstance(message, dict):
        message = message.get('value')
    return message or response.text[:300]


class SharePointSession:
    """
    Authenticated SharePoint REST session for one site.

    Wraps a requests.Session carrying the bearer token. Every remote operation
    the reconcilers consume is a method of this class; lists are referenced by
    the dict returned from get_list().
    """

    def __init__(self, site_url, access_token, max_retry=3, timeout=60, http=None):
        self.site_url = site_url.rstrip('/')
        self.max_retry = max_retry
        self.timeout = timeout
        self.closed = False
        self.http = http or requests.Session()
        self.http.headers.update({
            'Authorization': f'Bearer {access_token}',
            'Accept': 'application/json;odata=nometadata'
        })

    def _api_url(self, path):
        return f"{self.site_url}/_api/{path}"

    def _request(self, method, path, json_data=None, headers=None, params=None, allow_not_found=False,
                 retry_transient=True):
        """
        Send one REST call and turn failures into provisioning errors.

        Returns:
            requests.Response, or None for a 404 when allow_not_found is set

        Raises:
            RemoteWriteError: If a POST is rejected
            RemoteRequestError: If a GET is rejected or the network fails
        """
        is_write = method.upper() != 'GET'
        error_class = RemoteWriteError if is_write else RemoteRequestError

        try:
            response = make_request_with_retry(
                self.http, method, self._api_url(path), headers=headers, json_data=json_data,
                params=params, max_retries=self.max_retry, timeout=self.timeout,
                retry_transient=retry_transient
            )
        except requests.exceptions.RequestException as e:
            raise error_class(f"{method} {path} failed: {e}") from e

        if response.status_code == 404 and allow_not_found:
            return None
        if not response.ok:
            raise error_class(
                f"{method} {path} failed ({response.status_code}): {extract_error_message(response)}",
                status_code=response.status_code
            )
        return response

    def _write(self, path, payload=None, merge=False):
        headers = {'Content-Type': VERBOSE_JSON}
        if merge:
            headers['X-HTTP-Method'] = 'MERGE'
            headers['IF-MATCH'] = '*'
        return self._request('POST', path, json_data=payload, headers=headers, retry_transient=False)

    @staticmethod
    def _list_path(sp_list):
        return f"web/lists(guid'{sp_list['Id']}')"

    def get_web_title(self):
        """Return the site title. Used to verify the connection."""
        response = self._request('GET', 'web', params={'$select': 'Title'})
        return response.json().get('Title', '')

    def get_list(self, title):
        """
        Resolve a library by title.

        Returns:
            dict: {'Id': str, 'Title': str}

        Raises:
            NotFoundError: If no list has this title
        """
        response = self._request(
            'GET', f"web/lists/GetByTitle('{odata_quote(title)}')",
            params={'$select': 'Id,Title'}, allow_not_found=True
        )
        if response is None:
            raise NotFoundError(f"Library '{title}' does not exist on {self.site_url}")
        return response.json()

    def get_field(self, sp_list, internal_name):
        """
        Look up a field by internal name.

        Returns:
            dict: Field with Id, InternalName, Title, TypeAsString, Choices, SchemaXml, Description,
                  or None when the library has no such field
        """
        response = self._request(
            'GET', f"{self._list_path(sp_list)}/fields",
            params={
                '$filter': f"InternalName eq '{odata_quote(internal_name)}'",
                '$select': 'Id,InternalName,Title,TypeAsString,Choices,SchemaXml,Description'
            }
        )
        fields = response.json().get('value', [])
        return fields[0] if fields else None

    def add_field(self, sp_list, internal_name, display_name, choices):
        """
        Create a Choice field on a library, not added to the default view.

        Returns:
            dict: The created field
        """
        schema_xml = build_choice_field_schema(internal_name, display_name, choices)
        payload = {
            'parameters': {
                '__metadata': {'type': 'SP.XmlSchemaFieldCreationInformation'},
                'SchemaXml': schema_xml,
                'Options': ADD_FIELD_INTERNAL_NAME_HINT
            }
        }
        response = self._write(f"{self._list_path(sp_list)}/fields/CreateFieldAsXml", payload)
        if response.content:
            return response.json()
        return self.get_field(sp_list, internal_name)

    def set_field_properties(self, sp_list, field, properties):
        """
        Update field properties in place (MERGE).

        Used for the description and for replacing the SchemaXml.

        Args:
            sp_list (dict): Library from get_list()
            field (dict): Field from get_field() or add_field(), addressed by its Id
            properties (dict): Property bag, e.g. {'Description': '...'} or {'SchemaXml': '...'}
        """
        payload = {'__metadata': {'type': 'SP.Field'}}
        payload.update(properties)
        self._write(
            f"{self._list_path(sp_list)}/fields(guid'{field['Id']}')",
            payload, merge=True
        )

    def get_view(self, sp_list, title):
        """
        Look up a view by title, including its displayed fields.

        Returns:
            dict: {'Id', 'Title', 'ViewQuery', 'Fields': [internal names]}, or None when absent
        """
        response = self._request(
            'GET', f"{self._list_path(sp_list)}/views/GetByTitle('{odata_quote(title)}')",
            params={'$select': 'Id,Title,ViewQuery'}, allow_not_found=True
        )
        if response is None:
            return None
        view = response.json()

        fields_response = self._request(
            'GET', f"{self._list_path(sp_list)}/views(guid'{view['Id']}')/ViewFields"
        )
        view['Fields'] = list(fields_response.json().get('Items', []))
        return view

    def add_view(self, sp_list, title, fields, query):
        """
        Create a public view with the given fields and CAML query.

        Returns:
            dict: The created view
        """
        payload = {
            'parameters': {
                '__metadata': {'type': 'SP.ViewCreationInformation'},
                'Title': title,
                'ViewFields': {'results': list(fields)},
                'Query': query,
                'ViewTypeKind': 1,
                'PersonalView': False,
                'Paged': True,
                'RowLimit': 30
            }
        }
        response = self._write(f"{self._list_path(sp_list)}/views/add", payload)
        return response.json() if response.content else {}

    def set_view_fields(self, sp_list, title, fields):
        """
        Replace the displayed fields of an existing view.

        Only the ViewFields collection is touched; the view query is never sent.
        """
        view_fields_path = f"{self._list_path(sp_list)}/views/GetByTitle('{odata_quote(title)}')/ViewFields"
        self._write(f"{view_fields_path}/RemoveAllViewFields")
        for field in fields:
            self._write(f"{view_fields_path}/AddViewField('{odata_quote(field)}')")

    def disconnect(self):
        """Close the underlying HTTP session."""
        self.http.close()
        self.closed = True


def connect(site_url, tenant_id, client_id, certificate, certificate_password,
            login_endpoint="login.microsoftonline.com", max_retry=3, timeout=60):
    """
    Open an authenticated session to a SharePoint site.

    Args:
        site_url (str): Full site URL (e.g., 'https://contoso.sharepoint.com/sites/Docs')
        tenant_id (str): Azure AD tenant ID
        client_id (str): App registration client ID
        certificate (CertificateSource): PKCS#12 certificate source (path or base64 blob)
        certificate_password (str): Certificate passphrase
        login_endpoint (str): Azure AD endpoint
        max_retry (int): Retries for transient request failures
        timeout (int): Per-request timeout in seconds

    Returns:
        SharePointSession: Session to pass to the reconcilers

    Raises:
        ConfigError: If site_url is empty
        AuthError: If a credential input is missing or the certificate cannot be loaded
        SiteConnectionError: If token acquisition or the site check fails
    """
    if not site_url:
        raise ConfigError("site_url cannot be empty")
    for name, value in (('tenant_id', tenant_id), ('client_id', client_id),
                        ('certificate', certificate), ('certificate_password', certificate_password)):
        if not value:
            raise AuthError(f"{name} is required")

    credential = load_certificate_credential(certificate, certificate_password)
    if is_debug_enabled():
        print(f"[DEBUG] Certificate thumbprint: {credential['thumbprint']}")

    resource_host = urlparse(site_url).netloc
    try:
        token = acquire_token(tenant_id, client_id, credential, login_endpoint, resource_host)
    except (ValueError, requests.exceptions.RequestException) as e:
        raise SiteConnectionError(f"Token request to {login_endpoint} failed: {e}") from e

    if 'access_token' not in token:
        raise SiteConnectionError(
            f"Failed to acquire token for {resource_host}: {token.get('error_description', 'Unknown error')}"
        )

    session = SharePointSession(site_url, token['access_token'], max_retry=max_retry, timeout=timeout)
    try:
        title = session.get_web_title()
    except RemoteRequestError as e:
        session.disconnect()
        raise SiteConnectionError(f"Cannot reach {site_url}: {e}") from e

    print(f"[✓] Connected to SharePoint site '{title}' at {session.site_url}")
    return session


def disconnect_quietly(session):
    """
    Tear down a session as best-effort cleanup.

    Errors raised by teardown are logged and discarded so they never hide an
    earlier failure.
    """
    if session is None:
        return
    try:
        session.disconnect()
        if is_debug_enabled():
            print("[=] SharePoint session closed")
    except Exception as e:
        print(f"[!] Ignoring error while closing SharePoint session: {e}")
