# search_store.py (Elasticsearch collaborator handle)
import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from elasticsearch import Elasticsearch
from elasticsearch import helpers as es_helpers

logger = logging.getLogger(__name__)

PLAYBACK_MAPPING = {
    "properties": {
        "datetime": {"type": "date"},
        "hour_of_day": {"type": "integer"},
        "event_type": {"type": "keyword"},
        "country": {"type": "keyword"},
        "movie": {
            "properties": {
                "id": {"type": "integer"},
                "title": {"type": "text"},
                "rank": {"type": "integer"},
                "year": {"type": "integer"},
            }
        },
    }
}

POST_MAPPING = {
    "properties": {
        "title": {"type": "text"},
        "description": {"type": "text"},
        "tags": {"type": "keyword"},
    }
}


def _basic_auth(http_auth: Optional[str]) -> Optional[Tuple[str, str]]:
    if not http_auth:
        return None
    user, _, password = str(http_auth).partition(":")
    return (user, password)


class SearchStore:
    """
    Explicitly opened handle around an Elasticsearch client.
    Build from config with SearchStore.from_config(cfg), or pass a ready client (tests).
    Use as a context manager, or call open()/close().
    """

    def __init__(self, hosts: Optional[List[str]] = None, http_auth: Optional[str] = None,
                 request_timeout: float = 30, client=None):
        self.hosts = list(hosts or ["http://localhost:9200"])
        self.http_auth = http_auth
        self.request_timeout = request_timeout
        self._client = client
        self._owns_client = client is None

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "SearchStore":
        es = cfg.get("elasticsearch", {})
        return cls(hosts=es.get("hosts"), http_auth=es.get("http_auth"),
                   request_timeout=es.get("request_timeout", 30))

    # ---- lifecycle ----
    def open(self) -> "SearchStore":
        if self._client is None:
            self._client = Elasticsearch(hosts=self.hosts, basic_auth=_basic_auth(self.http_auth),
                                         request_timeout=self.request_timeout)
            self._owns_client = True
            logger.info("[ES] connected to %s", self.hosts)
        return self

    def close(self):
        # an injected client belongs to the caller; it stays attached for the next open()
        if self._client is not None and self._owns_client:
            self._client.close()
            self._client = None

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        self.close()

    @property
    def client(self):
        if self._client is None:
            raise RuntimeError("SearchStore is not open")
        return self._client

    # ---- operations ----
    def create_index(self, name: str, mappings: Optional[Dict[str, Any]] = None):
        logger.info("[INDEX] create %s", name)
        if mappings is not None:
            return self.client.indices.create(index=name, mappings=mappings)
        return self.client.indices.create(index=name)

    def refresh(self, name: str):
        return self.client.indices.refresh(index=name)

    def bulk_index(self, actions: Iterable[Dict[str, Any]], chunk_size: int = 500) -> Tuple[int, int]:
        """(succeeded, failed) counts; BulkIndexError propagates on the first failed chunk."""
        ok, failed = es_helpers.bulk(client=self.client, actions=actions, chunk_size=chunk_size,
                                     stats_only=True, raise_on_error=True)
        logger.info("[BULK] indexed ok=%d failed=%d", ok, failed)
        return ok, failed

    def update_mapping(self, name: str, mapping: Dict[str, Any]):
        # closed while the mapping changes, reopened even if put_mapping fails
        self.client.indices.close(index=name)
        try:
            self.client.indices.put_mapping(index=name, properties=mapping["properties"])
        finally:
            self.client.indices.open(index=name)

    def search(self, index: str, body: Dict[str, Any]):
        return self.client.search(index=index, **body)

    def analyze(self, index: str, field: str, text: str) -> List[str]:
        res = self.client.indices.analyze(index=index, field=field, text=text)
        return [t["token"] for t in res["tokens"]]
