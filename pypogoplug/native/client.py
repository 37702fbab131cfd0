"""Pogoplug API client.

Every API operation is a GET against ``<api_url>/<format>/<method>`` with its
arguments in the query string. Authenticated operations carry the session's
``valtoken``; when the server reports the token as invalid (ecode 606) the
client logs in again and repeats the call once.

Operations:
- Fetch the account user
- List devices and their services
- List and search files on a service
- Create, look up and remove files
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import BaseModel, ValidationError

from .auth import (
    AuthError,
    ConfigError,
    FileSessionStore,
    MemorySessionStore,
    SessionStore,
    load_config,
    resolve_config_path,
)
from .errors import (
    ApiError,
    DecodeError,
    ErrorCode,
    TokenExpiredError,
    TransportError,
)
from .models import (
    ApiException,
    ClientConfig,
    Device,
    FileType,
    PogoFile,
    ResponseFormat,
    Service,
    User,
)

if TYPE_CHECKING:
    from typing import Self

# API method names
LOGIN_METHOD = "loginUser"
GET_USER_METHOD = "getUser"
LIST_DEVICES_METHOD = "listDevices"
LIST_SERVICES_METHOD = "listServices"
LIST_FILES_METHOD = "listFiles"
SEARCH_FILES_METHOD = "searchFiles"
GET_FILE_METHOD = "getFile"
CREATE_FILE_METHOD = "createFile"
REMOVE_FILE_METHOD = "removeFile"

EXCEPTION_KEY = "HB-EXCEPTION"
TOKEN_PARAM = "valtoken"
PASSWORD_PARAM = "password"
REDACTED = "***"

# A rejected token is refreshed and the call repeated at most this many times
MAX_AUTH_RETRIES = 1


class PogoplugClient:
    """Client for the Pogoplug cloud API.

    Example:
        >>> client = PogoplugClient.from_config()
        >>> for device in client.list_devices():
        ...     print(device.name)
        >>> files = client.list_files(device_id, service_id)

    Attributes:
        config: Credentials and connection settings.
        session: Store holding the current validation token.
    """

    def __init__(
        self,
        config: ClientConfig,
        session: SessionStore | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Client configuration with the account credentials.
            session: Token store. Defaults to an in-memory store.

        Raises:
            ConfigError: If the configured response format is not JSON.
        """
        if config.response_format is not ResponseFormat.JSON:
            raise ConfigError(
                f"Unsupported response format: {config.response_format.value}"
            )

        self.config = config
        self.session: SessionStore = session or MemorySessionStore()

    def _build_url(self, method: str) -> str:
        """Build full URL for an API method."""
        base = self.config.api_url.rstrip("/")
        return f"{base}/{self.config.response_format.value}/{method}"

    @staticmethod
    def _encode_params(params: Mapping[str, Any]) -> dict[str, str]:
        """Drop unset parameters and stringify the rest."""
        encoded = {}
        for key, value in params.items():
            if value is None:
                continue
            if isinstance(value, bool):
                encoded[key] = "1" if value else "0"
            elif isinstance(value, FileType):
                encoded[key] = str(value.value)
            else:
                encoded[key] = str(value)
        return encoded

    def _send(self, method: str, query: dict[str, str]) -> tuple[dict[str, Any], str]:
        """Issue one GET request and decode the JSON body.

        Returns:
            The decoded payload and the requested URL.

        Raises:
            TransportError: If no response was received.
            DecodeError: If the body is not a JSON object.
        """
        url = self._build_url(method)

        try:
            with httpx.Client(timeout=self.config.timeout) as client:
                response = client.get(url, params=query)
        except httpx.HTTPError as e:
            raise TransportError(
                f"API request failed! {e}", url=url, method=method
            ) from e

        request_url = self._context_url(response.url, method)

        if not response.text.strip():
            return {}, request_url

        try:
            payload = response.json()
        except ValueError as e:
            raise DecodeError(
                f"Invalid JSON in response ({response.status_code})",
                url=request_url,
                method=method,
            ) from e

        if not isinstance(payload, dict):
            raise DecodeError(
                f"Expected a JSON object, got {type(payload).__name__}",
                url=request_url,
                method=method,
            )

        return payload, request_url

    @staticmethod
    def _find_exception(
        payload: dict[str, Any], *, url: str, method: str
    ) -> ApiException | None:
        """Return the exception descriptor carried by a payload, if any."""
        if EXCEPTION_KEY not in payload:
            return None

        try:
            return ApiException.model_validate(payload[EXCEPTION_KEY])
        except ValidationError as e:
            raise DecodeError(
                f"Malformed {EXCEPTION_KEY} envelope", url=url, method=method
            ) from e

    @staticmethod
    def _context_url(url: httpx.URL, method: str) -> str:
        """Render a request URL for error messages, hiding the password."""
        if method == LOGIN_METHOD and PASSWORD_PARAM in url.params:
            url = url.copy_set_param(PASSWORD_PARAM, REDACTED)
        return str(url)

    def dispatch(
        self, method: str, params: Mapping[str, Any] | None = None
    ) -> dict[str, Any]:
        """Call an API method and return its decoded payload.

        The session token is sent with every method except ``loginUser``. If
        the server rejects the token, a new one is fetched and the call is
        repeated once with the same parameters.

        Args:
            method: API method name, e.g. ``"listFiles"``.
            params: Query parameters. ``None`` values are omitted.

        Returns:
            The decoded JSON payload.

        Raises:
            TransportError: If no response was received.
            DecodeError: If the response cannot be decoded.
            TokenExpiredError: If the token is still rejected after a refresh.
            ApiError: If the API reports any other error.
        """
        payload, _ = self._request(method, params)
        return payload

    def _request(
        self, method: str, params: Mapping[str, Any] | None = None
    ) -> tuple[dict[str, Any], str]:
        """Run dispatch() and also return the URL of the final request."""
        params = dict(params or {})
        params.pop(TOKEN_PARAM, None)
        authenticated = method != LOGIN_METHOD

        if authenticated and self.session.get_token() is None:
            self.ensure_token()

        retries = 0
        while True:
            query: dict[str, Any] = {}
            if authenticated:
                query[TOKEN_PARAM] = self.session.get_token()
            query.update(params)

            logging.debug(f"Dispatching {method} (retry {retries})")
            payload, url = self._send(method, self._encode_params(query))

            exception = self._find_exception(payload, url=url, method=method)
            if exception is None:
                return payload, url

            expired = exception.ecode == ErrorCode.NOT_AUTHORIZED
            if expired and authenticated and retries < MAX_AUTH_RETRIES:
                retries += 1
                logging.info(f"valtoken rejected for {method}, logging in again")
                self.ensure_token(force_new=True)
                continue

            error_cls = TokenExpiredError if expired else ApiError
            raise error_cls(
                exception.ecode, url=url, method=method, detail=exception.message
            )

    def ensure_token(self, force_new: bool = False) -> bool:
        """Make sure the session holds a validation token.

        Args:
            force_new: Log in even if a token is already stored.

        Returns:
            True if a new token was fetched and stored, False otherwise.

        Raises:
            AuthError: If no credentials are configured.
            ApiError: If the login call itself fails.
        """
        if self.session.get_token() is not None and not force_new:
            return False

        if not self.config.has_credentials:
            raise AuthError(
                "No credentials configured. Set email/password in the config "
                "file or POGOPLUG_EMAIL/POGOPLUG_PASSWORD."
            )

        result = self.login_user()
        token = result.get(TOKEN_PARAM)
        if not token:
            logging.warning("loginUser response did not contain a valtoken")
            return False

        self.session.set_token(str(token))
        logging.info("Stored new valtoken")
        return True

    def login_user(self) -> dict[str, Any]:
        """Log in with the configured credentials.

        Returns:
            The raw login payload (``valtoken`` and ``user``).
        """
        return self.dispatch(
            LOGIN_METHOD,
            {"email": self.config.email, "password": self.config.password},
        )

    def _get_model(
        self,
        payload: dict[str, Any],
        key: str,
        model: type[BaseModel],
        *,
        url: str,
        method: str,
    ) -> Any:
        """Validate a single object field of a payload."""
        data = payload.get(key)
        if not isinstance(data, dict):
            raise DecodeError(
                f"Response has no '{key}' object",
                url=url,
                method=method,
            )
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise DecodeError(
                f"Invalid '{key}' object: {e}",
                url=url,
                method=method,
            ) from e

    def _get_models(
        self,
        payload: dict[str, Any],
        key: str,
        model: type[BaseModel],
        *,
        url: str,
        method: str,
    ) -> list[Any]:
        """Validate a list field of a payload (missing means empty)."""
        data = payload.get(key) or []
        # Single-element lists sometimes arrive as a bare object
        if isinstance(data, dict):
            data = [data]
        try:
            return [model.model_validate(item) for item in data]
        except ValidationError as e:
            raise DecodeError(
                f"Invalid '{key}' list: {e}",
                url=url,
                method=method,
            ) from e

    def get_user(self) -> User:
        """Fetch the account user's details."""
        payload, url = self._request(GET_USER_METHOD)
        return self._get_model(
            payload, "user", User, url=url, method=GET_USER_METHOD
        )

    def list_devices(self) -> list[Device]:
        """List the devices associated with the account.

        Returns:
            Devices, each with the services it exposes.
        """
        payload, url = self._request(LIST_DEVICES_METHOD)
        return self._get_models(
            payload, "devices", Device, url=url, method=LIST_DEVICES_METHOD
        )

    def list_services(
        self, device_id: str | None = None, shared: bool | None = None
    ) -> list[Service]:
        """List the services available to the user.

        Args:
            device_id: Only list services of this device.
            shared: Only list services shared with this user.

        Returns:
            List of Service objects.
        """
        payload, url = self._request(
            LIST_SERVICES_METHOD, {"deviceid": device_id, "shared": shared}
        )
        return self._get_models(
            payload, "services", Service, url=url, method=LIST_SERVICES_METHOD
        )

    def list_files(
        self,
        device_id: str,
        service_id: str,
        *,
        space_id: str | None = None,
        parent_id: str | None = None,
        page_offset: int | None = None,
        max_count: int | None = None,
        search_crit: str | None = None,
        sort_crit: str | None = None,
    ) -> list[PogoFile]:
        """List the contents of a directory, space or service.

        Args:
            device_id: Device holding the service.
            service_id: Service to list.
            space_id: Namespace to list within.
            parent_id: Directory to list (defaults to the root).
            page_offset: 0-based index of the page of results.
            max_count: Maximum number of items per page.
            search_crit: Search criteria filtering the listing.
            sort_crit: One of ``+name, -name, +date, -date, +type, -type,
                +size, -size``.

        Returns:
            List of PogoFile objects for the requested page.
        """
        payload, url = self._request(
            LIST_FILES_METHOD,
            {
                "deviceid": device_id,
                "serviceid": service_id,
                "spaceid": space_id,
                "parentid": parent_id,
                "pageoffset": page_offset,
                "maxcount": max_count,
                "searchcrit": search_crit,
                "sortcrit": sort_crit,
            },
        )
        return self._get_models(
            payload, "files", PogoFile, url=url, method=LIST_FILES_METHOD
        )

    def search_files(
        self,
        search_crit: str,
        device_id: str,
        service_id: str,
        *,
        page_offset: int | None = None,
        max_count: int | None = None,
        sort_crit: str | None = None,
    ) -> list[PogoFile]:
        """Search a whole service.

        Args:
            search_crit: Search criteria.
            device_id: Device holding the service.
            service_id: Service to search.
            page_offset: 0-based index of the page of results.
            max_count: Maximum number of items per page.
            sort_crit: Sort criteria, as for list_files().

        Returns:
            List of matching PogoFile objects.
        """
        payload, url = self._request(
            SEARCH_FILES_METHOD,
            {
                "serviceid": service_id,
                "deviceid": device_id,
                "searchcrit": search_crit,
                "pageoffset": page_offset,
                "maxcount": max_count,
                "sortcrit": sort_crit,
            },
        )
        return self._get_models(
            payload, "files", PogoFile, url=url, method=SEARCH_FILES_METHOD
        )

    def get_file(
        self,
        device_id: str,
        service_id: str,
        file_id: str | None = None,
        path: str | None = None,
    ) -> PogoFile:
        """Look up a file by id or by path.

        Raises:
            ValueError: If neither file_id nor path is given.
        """
        if file_id is None and path is None:
            raise ValueError("Either file_id or path must be given")

        payload, url = self._request(
            GET_FILE_METHOD,
            {
                "serviceid": service_id,
                "deviceid": device_id,
                "fileid": file_id,
                "path": path,
            },
        )
        return self._get_model(
            payload, "file", PogoFile, url=url, method=GET_FILE_METHOD
        )

    def create_file(
        self,
        device_id: str,
        service_id: str,
        filename: str,
        file_type: FileType | int = FileType.FILE,
        space_id: str | None = None,
        parent_id: str | None = None,
    ) -> PogoFile:
        """Create a new, empty file or directory.

        Args:
            device_id: Device to create the file on.
            service_id: Service to create the file on.
            filename: Name of the new file.
            file_type: Kind of entry to create.
            space_id: Namespace to create the file in (server default
                ``DEFAULT``).
            parent_id: Parent directory (defaults to the root).

        Returns:
            PogoFile for the created entry.
        """
        payload, url = self._request(
            CREATE_FILE_METHOD,
            {
                "serviceid": service_id,
                "deviceid": device_id,
                "filename": filename,
                "type": int(file_type),
                "spaceid": space_id,
                "parentid": parent_id,
            },
        )
        return self._get_model(
            payload, "file", PogoFile, url=url, method=CREATE_FILE_METHOD
        )

    def remove_file(
        self,
        device_id: str,
        service_id: str,
        file_id: str,
        space_id: str | None = None,
    ) -> None:
        """Remove a file or directory.

        There is no trash: the entry is deleted immediately.
        """
        self.dispatch(
            REMOVE_FILE_METHOD,
            {
                "serviceid": service_id,
                "deviceid": device_id,
                "fileid": file_id,
                "spaceid": space_id,
            },
        )

    @classmethod
    def from_config(cls, config_path: str | Path | None = None) -> Self:
        """Create a client from the config file.

        The token is persisted in the same file.

        Args:
            config_path: Path to config file. If None, uses default location.

        Returns:
            PogoplugClient backed by a FileSessionStore.
        """
        path = resolve_config_path(config_path)
        return cls(load_config(path), FileSessionStore(path))
