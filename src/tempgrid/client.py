# OOP boundary for external i/o
# all http/files/retries/csv tokenizing live here, so the rest of the code is pure and testable
# use a thread-local session so one client can be shared by worker threads

from __future__ import annotations
import csv
import io
import logging
import os
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("date", "max_temperature", "min_temperature")


class TableFetchError(RuntimeError):
    # single error type used to propagate clear messages from this layer
    pass


class TemperatureTableClient:
    # encapsulates where the daily table comes from: a local csv or an http(s) url
    DEFAULT_SOURCE = "temperature_daily.csv"
    DEFAULT_TIMEOUT = 10.0

    def __init__(
        self,
        default_source: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = 3,
        backoff_factor: float = 0.5,
        user_agent: str = "tempgrid/0.1",
    ):
        self.default_source = default_source or os.getenv("TEMPGRID_DATA_URL") or self.DEFAULT_SOURCE
        self.timeout = timeout
        self.user_agent = user_agent
        self._local = threading.local()

        # retry policy for transient network, server or rate-limit issues
        self._retry = Retry(
            total=max_retries,
            backoff_factor=backoff_factor,
            status_forcelist=(429, 500, 502, 503, 504),
            allowed_methods=("GET",),
            raise_on_status=False,
        )

    def _build_session(self) -> requests.Session:
        s = requests.Session()
        s.headers.update({"User-Agent": self.user_agent})
        adapter = HTTPAdapter(max_retries=self._retry)
        s.mount("http://", adapter)
        s.mount("https://", adapter)
        return s

    def _session(self) -> requests.Session:
        sess = getattr(self._local, "session", None)
        if sess is None:
            sess = self._build_session()
            self._local.session = sess
        return sess

    @staticmethod
    def _is_url(source: str) -> bool:
        return source.startswith(("http://", "https://"))

    def _get_url(self, url: str) -> str:
        try:
            resp = self._session().get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            raise TableFetchError(f"Request error for {url!r}: {exc}") from exc

        if resp.status_code >= 400:
            # include a short response snippet to speed up triage
            snippet = (resp.text or "")[:300]
            raise TableFetchError(f"HTTP {resp.status_code} for {url!r}. Body: {snippet}")
        # spreadsheet exports often start with a BOM, which would stick to the first header
        return resp.text.lstrip("\ufeff")

    def fetch_text(self, source: Optional[str] = None) -> str:
        source = source or self.default_source
        if self._is_url(source):
            return self._get_url(source)
        try:
            return Path(source).read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as exc:
            raise TableFetchError(f"Cannot read {source!r}: {exc}") from exc

    def fetch_rows(self, source: Optional[str] = None) -> List[Dict[str, Any]]:
        # tokenize with a header row; values stay strings, the normalizer coerces them
        source = source or self.default_source
        text = self.fetch_text(source)
        reader = csv.DictReader(io.StringIO(text))
        header = reader.fieldnames or []
        missing = [c for c in REQUIRED_COLUMNS if c not in header]
        if missing:
            raise TableFetchError(f"Table {source!r} is missing columns {missing} (header: {header})")

        # drop separator-only lines like ",,"; fully blank lines are already skipped by DictReader
        rows = [row for row in reader if any(v not in (None, "") for v in row.values())]
        logger.info(f"Loaded {len(rows)} rows from {source}")
        return rows
