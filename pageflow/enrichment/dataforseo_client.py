from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

import httpx
from loguru import logger

from pageflow.errors import KeywordProviderError
from pageflow.records import KeywordMetricData
from pageflow.utils.config_loader import Config


SEARCH_VOLUME_PATH = "/v3/keywords_data/google_ads/search_volume/live"
STATUS_OK = 20000
MAX_KEYWORDS_PER_TASK = 1000


def _as_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _as_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def parse_search_volume_response(payload: Dict[str, Any]) -> List[KeywordMetricData]:
    """Pull keyword rows out of a DataForSEO search-volume response."""
    if payload.get("status_code") != STATUS_OK:
        raise KeywordProviderError(
            f"DataForSEO error {payload.get('status_code')}: {payload.get('status_message')}"
        )

    metrics: List[KeywordMetricData] = []
    for task in payload.get("tasks") or []:
        if task.get("status_code") != STATUS_OK:
            raise KeywordProviderError(
                f"DataForSEO task error {task.get('status_code')}: {task.get('status_message')}"
            )
        for item in task.get("result") or []:
            keyword = (item.get("keyword") or "").strip()
            if not keyword:
                continue
            metrics.append(
                KeywordMetricData(
                    keyword=keyword,
                    search_volume=_as_int(item.get("search_volume")),
                    cpc=_as_float(item.get("cpc")),
                    competition=item.get("competition"),
                    competition_index=_as_int(item.get("competition_index")),
                    low_bid=_as_float(item.get("low_top_of_page_bid")),
                    high_bid=_as_float(item.get("high_top_of_page_bid")),
                )
            )
    return metrics


class DataForSEOClient:
    """Keyword metrics from the DataForSEO Google Ads search-volume endpoint."""

    def __init__(
        self,
        *,
        base_url: str,
        login: Optional[str],
        password: Optional[str],
        location_code: int = 2840,
        language_code: str = "en",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.login = login
        self.password = password
        self.location_code = location_code
        self.language_code = language_code
        self.timeout = timeout
        self.transport = transport
        self.client: Optional[httpx.AsyncClient] = None

    @classmethod
    def from_config(cls, config: Config, **kwargs) -> "DataForSEOClient":
        return cls(
            base_url=config.dataforseo_base_url,
            login=config.dataforseo_login,
            password=config.dataforseo_password,
            location_code=config.dataforseo_location_code,
            language_code=config.dataforseo_language_code,
            timeout=config.enrichment_timeout,
            **kwargs,
        )

    async def connect(self) -> None:
        if self.client is not None:
            return
        if not self.login or not self.password:
            logger.warning("DataForSEO credentials are not configured; enrichment will fail.")

        auth = httpx.BasicAuth(self.login, self.password) if self.login and self.password else None
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            auth=auth,
            timeout=httpx.Timeout(timeout=self.timeout),
            transport=self.transport,
        )
        logger.info(f"DataForSEO client ready ({self.base_url})")

    async def close(self) -> None:
        if self.client is not None:
            await self.client.aclose()
            self.client = None

    async def fetch_metrics(self, keywords: Sequence[str]) -> List[KeywordMetricData]:
        if not keywords:
            return []
        if self.client is None:
            await self.connect()

        keywords = list(keywords)
        body = [
            {
                "keywords": keywords[start : start + MAX_KEYWORDS_PER_TASK],
                "location_code": self.location_code,
                "language_code": self.language_code,
            }
            for start in range(0, len(keywords), MAX_KEYWORDS_PER_TASK)
        ]

        try:
            resp = await self.client.post(SEARCH_VOLUME_PATH, json=body)
            resp.raise_for_status()
            payload = resp.json()
        except httpx.HTTPStatusError as exc:
            raise KeywordProviderError(
                f"DataForSEO returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise KeywordProviderError(f"DataForSEO request failed: {exc}") from exc
        except ValueError as exc:
            raise KeywordProviderError("DataForSEO returned invalid JSON") from exc

        metrics = parse_search_volume_response(payload)
        logger.debug(f"DataForSEO returned metrics for {len(metrics)}/{len(keywords)} keywords")
        return metrics
