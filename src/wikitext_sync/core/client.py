import logging
import threading
from collections.abc import Mapping
from http.cookiejar import LoadError, MozillaCookieJar
from typing import Any

import requests

from ..config import Config
from ..sync.errors import ApiError, TransportError
from ..sync.models import EditToken
from ..sync.tokens import acquire_edit_token
from ..sync.version import fetch_generator

logger = logging.getLogger(__name__)


class MediaWikiClient:
    """Action-API transport for one wiki.

    Every request is POSTed to ``config.api_url`` with ``format=json``.
    One ``requests.Session`` is shared by every thread, so cookies the
    wiki sets on any request (or clears on logout) are seen by the next
    one.  When ``config.cookie_file`` names a Mozilla cookie jar, the
    session starts from those cookies, so a session logged in elsewhere
    can be reused.

    The handle is shared mutable state: callers must not run two
    requests through it at the same time.  Async callers go through
    ``core.async_utils.run_serialized``.
    """

    def __init__(self, config: Config):
        self.config = config
        self._session: requests.Session | None = None
        self._session_guard = threading.Lock()
        self.api_url = config.api_url

    @property
    def session(self) -> requests.Session:
        """The shared session, created on first use."""
        return self._get_session()

    def _get_session(self) -> requests.Session:
        with self._session_guard:
            if self._session is None:
                self._session = self._create_session()
            return self._session

    def _create_session(self) -> requests.Session:
        session = requests.Session()
        session.headers["User-Agent"] = self.config.user_agent
        session.verify = not self.config.insecure
        if self.config.cookie_file:
            jar = MozillaCookieJar(self.config.cookie_file)
            try:
                jar.load(ignore_discard=True, ignore_expires=True)
            except (OSError, LoadError) as e:
                raise TransportError(
                    f"Cannot load cookie file {self.config.cookie_file}: {e}"
                ) from e
            session.cookies.update(jar)
        return session

    def request(self, params: Mapping[str, str]) -> dict[str, Any]:
        """Send one action-API request and return the decoded JSON.

        Raises:
            TransportError: On network or HTTP failure, or a non-JSON body.
            ApiError: When the server answers with an ``error`` object.
        """
        data = {**params, "format": "json"}
        logger.debug(
            "POST %s action=%s", self.api_url, data.get("action", "")
        )
        try:
            response = self._get_session().post(
                self.api_url,
                data=data,
                timeout=(10, self.config.timeout),
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise TransportError(f"Request to {self.api_url} failed: {e}") from e

        try:
            body = response.json()
        except ValueError as e:
            raise TransportError(
                f"Non-JSON response from {self.api_url} "
                f"(HTTP {response.status_code})"
            ) from e

        if isinstance(body, dict) and isinstance(body.get("error"), dict):
            error = body["error"]
            raise ApiError(error.get("code"), error.get("info"))

        if isinstance(body, dict):
            for warning in (body.get("warnings") or {}).values():
                logger.debug("API warning: %s", warning)
        return body

    def site_generator(self) -> str | None:
        """Return the generator string, e.g. ``MediaWiki 1.41.0``."""
        return fetch_generator(self)

    def validate_connection(self) -> str:
        """Query siteinfo; returns the generator string or raises."""
        generator = self.site_generator()
        return generator or ""

    def logout(self) -> EditToken:
        """End the wiki session.

        Raises:
            TokenAcquisitionError: If no token could be obtained.
            TransportError: If the logout request fails.
        """
        token = acquire_edit_token(self)
        self.request({"action": "logout", "token": token.value})
        self._get_session().cookies.clear()
        logger.info("Logged out of %s", self.config.host)
        return token
