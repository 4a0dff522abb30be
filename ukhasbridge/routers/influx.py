import logging
from typing import Optional

import requests

from ukhasbridge.core.errors import PublishError


class InfluxPublisher:
    """Posts line-protocol records to the InfluxDB write endpoint.

    One record per call, HTTP Basic auth, raw text body. There is no retry or
    queueing: a failed publish raises PublishError and the record is gone.
    """

    def __init__(self, name: str, url: str, username: str, password: str,
                 timeout: Optional[float] = None, session: requests.Session = None):
        self.name = name
        self.url = url
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.auth = (username, password)

    def publish(self, line: str) -> None:
        try:
            resp = self._session.post(self.url, data=line.encode("utf-8"), timeout=self.timeout)
            body = resp.content
        except requests.RequestException as e:
            raise PublishError(f"Error posting to InfluxDB: {e}") from e
        if not 200 <= resp.status_code < 300:
            detail = body.decode("utf-8", errors="replace").strip()
            raise PublishError(f"InfluxDB rejected write: HTTP {resp.status_code} {detail}")
        logging.debug(f"[influx:{self.name}] wrote {len(line)} bytes, HTTP {resp.status_code}")

    def close(self):
        self._session.close()
