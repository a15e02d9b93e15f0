import logging

import requests

from fleetlog import config
from fleetlog.errors import NetworkFailure, NotFound, ValidationFailure
from fleetlog.records import get_kind

log = logging.getLogger(__name__)


class FleetClient:
    """HTTP client for the record store's ``/api`` routes."""

    def __init__(self, base_url, session=None, timeout=None):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout if timeout is not None else config.HTTP_TIMEOUT

    @classmethod
    def from_env(cls, session=None):
        return cls(config.api_base_url(), session=session)

    def _url(self, path):
        return f"{self.base_url}/api{path}"

    def _request(self, method, path, payload=None):
        url = self._url(path)
        try:
            resp = self.session.request(method, url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            log.error("%s %s failed: %s", method, url, e)
            raise NetworkFailure(str(e), url=self.base_url) from e
        if resp.status_code in (400, 422):
            raise ValidationFailure(self._message(resp))
        if resp.status_code == 404:
            raise NotFound(self._message(resp))
        if resp.status_code >= 400:
            log.error("%s %s returned %s", method, url, resp.status_code)
            raise NetworkFailure(self._message(resp), url=self.base_url, status=resp.status_code)
        if resp.status_code == 204 or not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            log.error("%s %s returned a non-JSON body", method, url)
            raise NetworkFailure("response was not JSON; check FLEET_API_URL", url=self.base_url,
                                 status=resp.status_code) from e

    @staticmethod
    def _message(resp):
        try:
            body = resp.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("error"):
            return str(body["error"])
        return resp.reason or f"HTTP {resp.status_code}"

    def health(self):
        return self._request("GET", "/health")

    def list(self, kind):
        return self._request("GET", get_kind(kind).route)

    def create(self, kind, payload):
        return self._request("POST", get_kind(kind).route, payload)

    def update(self, kind, record_id, changes):
        return self._request("PUT", f"{get_kind(kind).route}/{record_id}", changes)

    def delete(self, kind, record_id):
        self._request("DELETE", f"{get_kind(kind).route}/{record_id}")
