from __future__ import annotations

import logging
from typing import Callable, Dict, List, Sequence

import requests

from ..core.exceptions import PortalError, PortalLoginError
from .parser import parse_csrf_token, parse_hours_table

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8",
    "Accept-Language": "fr,es;q=0.9,it;q=0.8,en;q=0.7",
    "Cache-Control": "no-cache",
    "DNT": "1",
    "Pragma": "no-cache",
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-Site": "same-origin",
    "Sec-Fetch-User": "?1",
    "Upgrade-Insecure-Requests": "1",
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36"
    ),
}


class KelioClient:
    """Screen-scraping client for the Kelio intranet.

    Every call opens its own `requests.Session`; the only state carried
    between calls is the JSESSIONID returned by `login`.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 15.0,
        verify_ssl: bool = True,
        page_offsets: Sequence[int] = (0, 4, 8),
        session_factory: Callable[[], requests.Session] = requests.Session,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = float(timeout)
        self._verify = bool(verify_ssl)
        self._offsets = tuple(int(o) for o in page_offsets)
        self._session_factory = session_factory

    def login(self, username: str, password: str) -> str:
        session = self._new_session()
        try:
            login_page = self._request(session, "GET", "/open/login")
            csrf = parse_csrf_token(login_page.text)
            if not csrf:
                raise PortalLoginError("Unable to get CSRF token")

            response = self._request(
                session,
                "POST",
                "/open/j_spring_security_check",
                data={
                    "ACTION": "ACTION_VALIDER_LOGIN",
                    "username": username,
                    "password": password,
                    "_csrf_bodet": csrf,
                },
                headers={
                    "Content-Type": "application/x-www-form-urlencoded",
                    "Origin": self._base_url,
                    "Referer": f"{self._base_url}/open/login?logout=1",
                },
                allow_redirects=False,
            )
        finally:
            session.close()

        jsessionid = response.cookies.get("JSESSIONID")
        location = response.headers.get("Location")
        if not jsessionid or not location:
            logger.info("Portal login rejected for %s", username)
            raise PortalLoginError("Login failed")

        logger.info("Portal login succeeded for %s", username)
        return jsessionid

    def fetch_fragments(self, jsessionid: str) -> List[Dict[str, List[str]]]:
        """One raw `{date: [times]}` fragment per configured page offset."""
        session = self._new_session()
        fragments: List[Dict[str, List[str]]] = []
        try:
            for offset in self._offsets:
                response = self._request(
                    session,
                    "GET",
                    "/open/homepage",
                    params={"ACTION": "intranet", "asked": 3, "header": 0, "offset": offset},
                    cookies={"JSESSIONID": jsessionid},
                    allow_redirects=False,
                )
                if not response.ok:
                    raise PortalError(f"Portal returned HTTP {response.status_code} for offset {offset}")
                fragments.append(parse_hours_table(response.text))
        finally:
            session.close()

        logger.debug("Fetched %s portal pages (%s days)", len(fragments), sum(len(f) for f in fragments))
        return fragments

    def _new_session(self) -> requests.Session:
        session = self._session_factory()
        session.headers.update(DEFAULT_HEADERS)
        return session

    def _request(self, session: requests.Session, method: str, path: str, **kwargs) -> requests.Response:
        url = f"{self._base_url}{path}"
        try:
            return session.request(method, url, timeout=self._timeout, verify=self._verify, **kwargs)
        except requests.RequestException as exc:
            logger.warning("Portal request %s %s failed: %s", method, path, exc)
            raise PortalError(f"Unable to reach the portal: {exc}") from exc
