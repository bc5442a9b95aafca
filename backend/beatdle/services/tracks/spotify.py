import logging
import random
import string
import threading
import time
from collections import OrderedDict
from datetime import date, datetime, timezone
from typing import Iterable, List, Optional

import httpx

from beatdle.errors import TrackNotFoundError, TrackProviderError
from .records import TrackRecord, TrackSuggestion


DAILY_TERMS = ('pop', 'hits', 'top', 'billboard', 'viral')
# Tried in order; 0 accepts any candidate with an id
DAILY_POPULARITY_TIERS = (80, 70, 0)
RANDOM_TERMS = ('pop', 'rock', 'hip hop', 'dance', 'electronic', 'indie', 'hits', 'chart')
RANDOM_MIN_POPULARITY = 70
CANDIDATE_POOL_SIZE = 50
MAX_RECENT_TRACKS = 20


def daily_seed(day: date) -> int:
    return sum(ord(c) for c in day.isoformat())


class SpotifyClient:
    """Track provider backed by the Spotify Web API.

    Uses the client credentials flow; the access token is cached until a
    minute before it expires. Random tracks avoid the last
    ``MAX_RECENT_TRACKS`` ids served by this client in addition to any
    caller-supplied exclusions.
    """

    TOKEN_URL = 'https://accounts.spotify.com/api/token'
    API_URL = 'https://api.spotify.com/v1'

    def __init__(self, client_id: str, client_secret: str, market: str = 'US',
                 timeout: float = 10.0, http: Optional[httpx.Client] = None,
                 rng: Optional[random.Random] = None, logger=None):
        self.client_id = client_id
        self.client_secret = client_secret
        self.market = market
        self.http = http or httpx.Client(timeout=timeout)
        self.rng = rng or random.Random()
        self.logger = logger or logging.getLogger(__name__)
        self._token: Optional[str] = None
        self._token_expires_at = 0.0
        self._recent: 'OrderedDict[str, None]' = OrderedDict()
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, config, logger=None) -> 'SpotifyClient':
        return cls(
            client_id=config.get('SPOTIFY_CLIENT_ID', ''),
            client_secret=config.get('SPOTIFY_CLIENT_SECRET', ''),
            market=config.get('SPOTIFY_MARKET', 'US'),
            timeout=float(config.get('SPOTIFY_TIMEOUT_SEC', 10)),
            logger=logger,
        )

    # ---- HTTP plumbing ----

    def _access_token(self) -> str:
        if self._token and time.time() < self._token_expires_at:
            return self._token
        if not self.client_id or not self.client_secret:
            raise TrackProviderError('Spotify client id/secret are not configured')
        try:
            resp = self.http.post(
                self.TOKEN_URL,
                data={'grant_type': 'client_credentials'},
                auth=(self.client_id, self.client_secret),
            )
        except httpx.HTTPError as exc:
            raise TrackProviderError(f'Spotify token request failed: {exc}') from exc
        if resp.status_code != 200:
            self.logger.error(f"[spotify-token] status={resp.status_code} body={resp.text[:200]}")
            raise TrackProviderError('Unable to get Spotify access token')
        data = resp.json()
        self._token = data['access_token']
        self._token_expires_at = time.time() + max(0, int(data.get('expires_in', 3600)) - 60)
        return self._token

    def _get(self, path: str, params=None) -> dict:
        token = self._access_token()
        try:
            resp = self.http.get(
                f'{self.API_URL}{path}',
                params=params,
                headers={'Authorization': f'Bearer {token}'},
            )
        except httpx.HTTPError as exc:
            raise TrackProviderError(f'Spotify request failed: {exc}') from exc
        if resp.status_code == 404:
            raise TrackNotFoundError(f'Spotify resource not found: {path}')
        if resp.status_code == 401:
            # Token revoked or expired early; fetch a fresh one next call
            self._token = None
        if resp.is_error:
            self.logger.error(f"[spotify-error] path={path} status={resp.status_code} body={resp.text[:200]}")
            raise TrackProviderError(f'Spotify API error {resp.status_code}')
        return resp.json()

    def _search_items(self, query: str, limit: int) -> List[dict]:
        data = self._get('/search', params={
            'q': query, 'type': 'track', 'market': self.market, 'limit': limit,
        })
        return [t for t in (data.get('tracks') or {}).get('items') or [] if t]

    def _remember(self, track_id: str) -> None:
        with self._lock:
            self._recent.pop(track_id, None)
            self._recent[track_id] = None
            while len(self._recent) > MAX_RECENT_TRACKS:
                self._recent.popitem(last=False)

    @property
    def recent_track_ids(self) -> List[str]:
        return list(self._recent)

    # ---- Provider contract ----

    def resolve_track(self, track_id: str) -> TrackRecord:
        data = self._get(f'/tracks/{track_id}', params={'market': self.market})
        return TrackRecord.from_spotify(data)

    def search(self, query: str, limit: int = 5) -> List[TrackSuggestion]:
        return [TrackSuggestion.from_spotify(t) for t in self._search_items(query, limit) if t.get('id')]

    def resolve_daily_track(self, day: Optional[date] = None) -> TrackRecord:
        """Same calendar date -> same track."""
        day = day or datetime.now(timezone.utc).date()
        seed = daily_seed(day)
        term = DAILY_TERMS[seed % len(DAILY_TERMS)]
        items = self._search_items(term, CANDIDATE_POOL_SIZE)
        if not items:
            raise TrackProviderError('No tracks returned from search')

        candidates: List[dict] = []
        for threshold in DAILY_POPULARITY_TIERS:
            candidates = [t for t in items if t.get('id') and (t.get('popularity') or 0) >= threshold]
            if candidates:
                break
            self.logger.warning(f"[daily-track] day={day} no candidates at popularity>={threshold}")
        if not candidates:
            raise TrackProviderError('No valid tracks found')

        pick = candidates[seed % len(candidates)]
        return self.resolve_track(pick['id'])

    def resolve_random_track(self, exclude_ids: Iterable[str] = ()) -> TrackRecord:
        term = self.rng.choice(RANDOM_TERMS)
        try:
            items = self._search_items(term, CANDIDATE_POOL_SIZE)
        except TrackProviderError as exc:
            self.logger.warning(f"[random-track] term={term!r} primary search failed ({exc}), falling back")
            return self._fallback_random_track()

        excluded = set(exclude_ids) | set(self._recent)
        candidates = [
            t for t in items
            if t.get('id') and t['id'] not in excluded
            and (t.get('popularity') or 0) >= RANDOM_MIN_POPULARITY
        ]
        if not candidates:
            self.logger.warning(f"[random-track] term={term!r} pool exhausted, clearing recent cache")
            with self._lock:
                self._recent.clear()
            return self._fallback_random_track()

        pick = self.rng.choice(candidates)
        self._remember(pick['id'])
        try:
            return self.resolve_track(pick['id'])
        except TrackProviderError as exc:
            self.logger.warning(f"[random-track] track={pick['id']} lookup failed ({exc}), falling back")
            return self._fallback_random_track()

    def _fallback_random_track(self) -> TrackRecord:
        # Broad search: a single random letter matches almost anything
        letter = self.rng.choice(string.ascii_lowercase)
        items = self._search_items(letter, 1)
        if not items or not items[0].get('id'):
            raise TrackProviderError('No track found in fallback search')
        return self.resolve_track(items[0]['id'])
