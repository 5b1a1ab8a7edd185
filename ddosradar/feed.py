"""Cloudflare Radar client: top layer 7 attacks (origin country → target country)."""
import os
from datetime import datetime, timezone

import requests

from .model import AttackRecord
from .settings import debug_log

RADAR_URL = "https://api.cloudflare.com/client/v4/radar/attacks/layer7/top/attacks"
TOKEN_ENV = "CLOUDFLARE_API_KEY"
TIME_FMT = "%Y-%m-%dT%H:%M:%SZ"


class FeedError(Exception):
    """Any failure to obtain a batch of attacks (transport, status, payload)."""

    kind = "feed error"


class CredentialMissing(FeedError):
    kind = "credential missing"


def load_token(env=None):
    """Read the API token once at startup. A missing token is not fatal."""
    env = os.environ if env is None else env
    token = env.get(TOKEN_ENV)
    if not token:
        debug_log(f"FEED: {TOKEN_ENV} not set, every fetch will fail until restart")
        return None
    return token


def time_window(lookback, now=None):
    """Return the (dateStart, dateEnd) query strings for ``[now - lookback, now]``."""
    end = now or datetime.now(timezone.utc)
    start = end - lookback
    return start.strftime(TIME_FMT), end.strftime(TIME_FMT)


class CloudflareRadarFeed:
    """AttackFeedProvider backed by the Radar API. One blocking request per fetch()."""

    def __init__(self, token, endpoint=RADAR_URL, timeout=20, session=None):
        self.token = token
        self.endpoint = endpoint
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch(self, lookback):
        if lookback.total_seconds() <= 0:
            raise ValueError("lookback must be a positive duration")
        if not self.token:
            raise CredentialMissing(f"{TOKEN_ENV} is not set")

        date_start, date_end = time_window(lookback)
        params = {"dateStart": date_start, "dateEnd": date_end}
        headers = {"Authorization": f"Bearer {self.token}"}
        try:
            r = self.session.get(self.endpoint, params=params, headers=headers, timeout=self.timeout)
            r.raise_for_status()
            payload = r.json()
        except requests.RequestException as e:
            err_msg = str(e)
            if getattr(e, 'response', None) is not None:
                err_msg += f" (Code: {e.response.status_code}, Body: {e.response.text[:100]})"
            raise FeedError(err_msg) from e
        except ValueError as e:
            # body was not JSON
            raise FeedError(f"malformed payload: {e}") from e

        return parse_response(payload)


def parse_response(payload):
    """Turn a decoded Radar response into AttackRecords, in the feed's own order."""
    if not isinstance(payload, dict):
        raise FeedError("malformed payload: not an object")
    if not payload.get("success"):
        raise FeedError(f"feed reported failure ({len(payload.get('errors') or [])} errors)")
    try:
        rows = payload["result"]["top_0"]
        return [AttackRecord.from_feed(row) for row in rows]
    except (KeyError, TypeError) as e:
        raise FeedError(f"malformed payload: {e!r}") from e
