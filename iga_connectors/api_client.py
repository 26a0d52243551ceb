"""Async API client shared by the Okta, BambooHR and Slack connectors."""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Dict, List, Optional, Tuple

import aiohttp

from .auth import HeaderAuthenticator
from .errors import UpstreamError

logger = logging.getLogger("iga_connectors.api_client")


class ApiClient:
    provider = "api"

    def __init__(self, base_url: str, authenticator: HeaderAuthenticator, config_loader=None):
        self.base_url = base_url.rstrip("/")
        self.authenticator = authenticator
        self.config_loader = config_loader

        rate_config = config_loader.get("async_config.rate_limiting", {}) if config_loader else {}
        self.rate_limit_per_minute = rate_config.get("rate_limit_per_minute", 50)
        self.burst_size = rate_config.get("burst_size", 10)
        self.retry_429_delay = rate_config.get("retry_429_delay", 10)
        self.backoff_multiplier = rate_config.get("backoff_multiplier", 1.5)
        self.max_retry_delay = rate_config.get("max_retry_delay", 300)
        self.max_429_retries = rate_config.get("max_429_retries", 3)

        concurrency_config = config_loader.get("async_config.concurrency", {}) if config_loader else {}
        self.max_concurrent_api_calls = concurrency_config.get("max_concurrent_api_calls", 5)

        perf_config = config_loader.get("async_config.performance", {}) if config_loader else {}
        self.connection_pool_size = perf_config.get("connection_pool_size", 20)
        self.connection_timeout = perf_config.get("connection_timeout", 10)
        self.read_timeout = perf_config.get("read_timeout", 30)
        self.keep_alive = perf_config.get("keep_alive", True)

        self.session: Optional[aiohttp.ClientSession] = None
        self.api_semaphore: Optional[asyncio.Semaphore] = None

        self.request_count = 0
        self.start_time = time.time()
        self.rate_limit_lock = asyncio.Lock()

    async def __aenter__(self):
        connector = aiohttp.TCPConnector(
            limit=self.connection_pool_size,
            ttl_dns_cache=300,
            use_dns_cache=True,
            keepalive_timeout=60 if self.keep_alive else 0,
            enable_cleanup_closed=True,
        )
        timeout = aiohttp.ClientTimeout(total=None, connect=self.connection_timeout, sock_read=self.read_timeout)
        self.session = aiohttp.ClientSession(connector=connector, timeout=timeout)
        try:
            await self.authenticator.setup_authentication()
        except RuntimeError:
            await self.session.close()
            raise
        self.api_semaphore = asyncio.Semaphore(self.max_concurrent_api_calls)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self.session:
            await self.session.close()

    async def check_rate_limit(self):
        async with self.rate_limit_lock:
            current_time = time.time()
            elapsed = current_time - self.start_time
            if elapsed >= 60:
                self.request_count = 0
                self.start_time = current_time
                elapsed = 0
            accumulated_requests = int((elapsed / 60) * self.rate_limit_per_minute)
            available_requests = self.burst_size + accumulated_requests
            if self.request_count >= available_requests:
                requests_per_second = self.rate_limit_per_minute / 60
                sleep_time = max(1.0 / requests_per_second, 0)
                if sleep_time > 0:
                    await asyncio.sleep(min(sleep_time, 60))
            self.request_count += 1

    def _url(self, endpoint: str) -> str:
        if endpoint.startswith(("http://", "https://")):
            return endpoint
        return f"{self.base_url}{endpoint}"

    def _retry_delay(self, response: aiohttp.ClientResponse, backoff: float) -> float:
        retry_after = response.headers.get("Retry-After")
        try:
            return min(float(retry_after), self.max_retry_delay)
        except (TypeError, ValueError):
            return backoff

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
    ) -> Tuple[Any, Optional[aiohttp.typedefs.LooseHeaders]]:
        if not self.session or not self.api_semaphore:
            raise RuntimeError(f"{type(self).__name__} not initialized; use async context manager")

        async with self.api_semaphore:
            await self.check_rate_limit()
            headers = await self.authenticator.get_headers()
            url = self._url(endpoint)
            backoff = self.retry_429_delay
            attempts = 0
            while True:
                try:
                    async with self.session.request(method, url, params=params, json=json_body, headers=headers) as response:
                        logger.debug("%s %s %s -> Status: %s", self.provider, method, endpoint, response.status)
                        if response.status == 429 and attempts < self.max_429_retries:
                            attempts += 1
                            delay = self._retry_delay(response, backoff)
                            logger.warning("%s rate limited (429). Waiting %s seconds...", self.provider, delay)
                            await asyncio.sleep(delay)
                            backoff = min(backoff * self.backoff_multiplier, self.max_retry_delay)
                            continue
                        if response.status >= 400:
                            body = await response.text()
                            raise UpstreamError(
                                f"{self.provider} {method} {endpoint} failed: {response.status} {response.reason}. {body[:300]}",
                                provider=self.provider,
                                http_status=response.status,
                            )
                        if response.status == 204:
                            return None, response.headers
                        data = await response.json(content_type=None)
                        return data, response.headers
                except asyncio.TimeoutError as exc:
                    raise UpstreamError(f"{self.provider} {method} {endpoint} timed out", provider=self.provider) from exc
                except aiohttp.ClientError as exc:
                    raise UpstreamError(f"{self.provider} {method} {endpoint} failed: {exc}", provider=self.provider) from exc

    async def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        data, _ = await self._request("GET", endpoint, params)
        return data

    async def fetch_paginated(self, endpoint: str, base_params: Optional[Dict[str, Any]] = None) -> List[Dict]:
        """Follow ``Link: <...>; rel="next"`` headers until exhausted."""
        all_items: List[Dict] = []
        params: Optional[Dict[str, Any]] = dict(base_params or {})
        params.setdefault("limit", 200)
        next_url: Optional[str] = endpoint

        while next_url:
            payload, headers = await self._request("GET", next_url, params)
            if isinstance(payload, list):
                all_items.extend(payload)
            elif isinstance(payload, dict):
                items = payload.get("items") or payload.get("value") or []
                if isinstance(items, list):
                    all_items.extend(items)
                else:
                    all_items.append(payload)
            link_header = headers.get("link") if headers else None
            next_url = self._extract_next_from_link(link_header)
            # the next link already carries the query string
            params = None
        return all_items

    @staticmethod
    def _extract_next_from_link(link_header: Optional[str]) -> Optional[str]:
        if not link_header:
            return None
        parts = [p.strip() for p in link_header.split(",")]
        for part in parts:
            if "rel=\"next\"" in part:
                url_part = part.split(";")[0].strip()
                if url_part.startswith("<") and url_part.endswith(">"):
                    return url_part[1:-1]
        return None
