"""
Politique de cache hors ligne du worker PWA.

Table déclarative motif d'URL -> stratégie, appliquée aux requêtes GET :

- cache-first : réponse en cache si présente, sinon réseau puis mise en cache ;
- network-first : réseau, mise en cache en cas de succès, cache si le réseau échoue ;
- stale-while-revalidate : réponse en cache immédiate, rafraîchie en arrière-plan.

Chaque cache nommé borne son nombre d'entrées et leur âge ; les entrées les
plus anciennement insérées sont évincées en premier (FIFO, pas LRU).
"""
import logging
import re
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Pattern, Tuple

import httpx

from teamup.worker.events import ExtendableEvent

logger = logging.getLogger(__name__)

Fetcher = Callable[[httpx.Request], Awaitable[httpx.Response]]
Clock = Callable[[], float]

CACHE_FIRST = "CacheFirst"
NETWORK_FIRST = "NetworkFirst"
STALE_WHILE_REVALIDATE = "StaleWhileRevalidate"


@dataclass(frozen=True)
class CacheExpiration:
    max_entries: Optional[int] = None
    max_age_seconds: Optional[float] = None


@dataclass(frozen=True)
class RuntimeCachingRule:
    url_pattern: str
    handler: str
    cache_name: str
    expiration: CacheExpiration = CacheExpiration()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "urlPattern": self.url_pattern,
            "handler": self.handler,
            "options": {
                "cacheName": self.cache_name,
                "expiration": {
                    "maxEntries": self.expiration.max_entries,
                    "maxAgeSeconds": self.expiration.max_age_seconds,
                },
            },
        }


STATIC_CACHE_RULE = RuntimeCachingRule(
    url_pattern=".*",
    handler=CACHE_FIRST,
    cache_name="teamup-static",
)

RUNTIME_CACHING: List[RuntimeCachingRule] = [
    RuntimeCachingRule(
        url_pattern=r"^https://firestore\.googleapis\.com",
        handler=NETWORK_FIRST,
        cache_name="firebase-cache",
        expiration=CacheExpiration(max_entries=50, max_age_seconds=300),  # 5 minutes
    ),
    RuntimeCachingRule(
        url_pattern=r"^https://.*\.googleapis\.com",
        handler=STALE_WHILE_REVALIDATE,
        cache_name="google-apis",
        expiration=CacheExpiration(max_entries=10, max_age_seconds=86400),  # 1 jour
    ),
]


class NamedCache:
    def __init__(self, name: str, expiration: Optional[CacheExpiration] = None, clock: Clock = time.time):
        self.name = name
        self.expiration = expiration or CacheExpiration()
        self.clock = clock
        self._entries: "OrderedDict[str, Tuple[float, httpx.Response]]" = OrderedDict()

    @staticmethod
    def key_for(request: httpx.Request) -> str:
        return str(request.url)

    def __len__(self) -> int:
        return len(self._entries)

    def keys(self) -> List[str]:
        return list(self._entries)

    def match(self, request: httpx.Request) -> Optional[httpx.Response]:
        self._evict_expired()
        entry = self._entries.get(self.key_for(request))
        return entry[1] if entry else None

    def put(self, request: httpx.Request, response: httpx.Response) -> None:
        key = self.key_for(request)
        # Une nouvelle écriture repasse en fin de file
        self._entries.pop(key, None)
        self._entries[key] = (self.clock(), response)
        self._evict_expired()
        self._evict_overflow()

    def _evict_expired(self) -> None:
        max_age = self.expiration.max_age_seconds
        if max_age is None:
            return
        now = self.clock()
        expired = [key for key, (stored_at, _) in self._entries.items() if now - stored_at > max_age]
        for key in expired:
            del self._entries[key]

    def _evict_overflow(self) -> None:
        max_entries = self.expiration.max_entries
        if max_entries is None:
            return
        while len(self._entries) > max_entries:
            key, _ = self._entries.popitem(last=False)
            logger.debug(f"🗑️ Cache {self.name} : éviction de {key}")


def is_cacheable(response: httpx.Response) -> bool:
    return response.status_code == 200


class Strategy:
    name = ""

    def __init__(self, cache: NamedCache):
        self.cache = cache

    async def handle(self, request: httpx.Request, fetch: Fetcher, event: ExtendableEvent) -> httpx.Response:
        raise NotImplementedError

    async def fetch_and_cache(self, request: httpx.Request, fetch: Fetcher) -> httpx.Response:
        response = await fetch(request)
        if is_cacheable(response):
            await response.aread()
            self.cache.put(request, response)
        return response


class CacheFirst(Strategy):
    name = CACHE_FIRST

    async def handle(self, request, fetch, event):
        cached = self.cache.match(request)
        if cached is not None:
            return cached
        return await self.fetch_and_cache(request, fetch)


class NetworkFirst(Strategy):
    name = NETWORK_FIRST

    async def handle(self, request, fetch, event):
        try:
            return await self.fetch_and_cache(request, fetch)
        except httpx.TransportError:
            cached = self.cache.match(request)
            if cached is None:
                raise
            logger.info(f"📴 Réseau indisponible, réponse en cache pour {request.url}")
            return cached


class StaleWhileRevalidate(Strategy):
    name = STALE_WHILE_REVALIDATE

    async def handle(self, request, fetch, event):
        cached = self.cache.match(request)
        if cached is None:
            return await self.fetch_and_cache(request, fetch)
        event.wait_until(self.fetch_and_cache(request, fetch))
        return cached


STRATEGIES = {
    CACHE_FIRST: CacheFirst,
    NETWORK_FIRST: NetworkFirst,
    STALE_WHILE_REVALIDATE: StaleWhileRevalidate,
}


@dataclass
class Route:
    pattern: Pattern[str]
    strategy: Strategy

    def matches(self, url: str) -> bool:
        return self.pattern.match(url) is not None


class CachePolicy:
    def __init__(self, routes: List[Route], default: Strategy):
        self.routes = routes
        self.default = default

    def strategy_for(self, request: httpx.Request) -> Optional[Strategy]:
        if request.method != "GET":
            return None
        url = str(request.url)
        for route in self.routes:
            if route.matches(url):
                return route.strategy
        return self.default

    async def handle_fetch(
        self, request: httpx.Request, fetch: Fetcher, event: ExtendableEvent
    ) -> httpx.Response:
        strategy = self.strategy_for(request)
        if strategy is None:
            return await fetch(request)
        return await strategy.handle(request, fetch, event)

    def cache(self, name: str) -> Optional[NamedCache]:
        for strategy in [route.strategy for route in self.routes] + [self.default]:
            if strategy.cache.name == name:
                return strategy.cache
        return None


def build_strategy(rule: RuntimeCachingRule, clock: Clock = time.time) -> Strategy:
    cache = NamedCache(rule.cache_name, rule.expiration, clock=clock)
    return STRATEGIES[rule.handler](cache)


def build_policy(
    rules: List[RuntimeCachingRule] = RUNTIME_CACHING,
    default: RuntimeCachingRule = STATIC_CACHE_RULE,
    clock: Clock = time.time,
) -> CachePolicy:
    routes = [Route(re.compile(rule.url_pattern), build_strategy(rule, clock)) for rule in rules]
    return CachePolicy(routes, build_strategy(default, clock))
