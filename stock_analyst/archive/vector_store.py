"""
Vector indexes over archived report embeddings.

    LocalVectorIndex     embeddings attached to the SQLite report row,
                         cosine similarity computed with numpy
    PineconeVectorIndex  separate Pinecone index keyed by report id

Both return ``VectorMatch`` lists ordered by similarity, ties broken by the
most recent report first.

Environment variables (Pinecone backend)
----------------------------------------
  PINECONE_API_KEY   — your Pinecone API key
  PINECONE_INDEX     — name of the Pinecone index (default: "stock-reports")
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import List, Optional, Sequence

import numpy as np
from pydantic import BaseModel

from stock_analyst.core.protocol import ArchiveError, ConfigurationError
from stock_analyst.utils.logging import get_logger
from .report_store import ReportStore

logger = get_logger(__name__)

_EMBEDDING_DIM = 1536          # text-embedding-3-small dimension
_NAMESPACE = "stock-reports"
_EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)


class VectorMatch(BaseModel):
    report_id: str
    score: float
    created_at: datetime


def rank_matches(matches: List[VectorMatch], top_k: int) -> List[VectorMatch]:
    """Order by similarity descending, most recent first on ties, and cut to *top_k*."""
    by_recency = sorted(matches, key=lambda m: m.created_at, reverse=True)
    return sorted(by_recency, key=lambda m: m.score, reverse=True)[:top_k]


class VectorIndex(ABC):
    name = "vector_index"

    @abstractmethod
    async def upsert(self, report_id: str, ticker: str, created_at: datetime, vector: Sequence[float]) -> None:
        """Associate *vector* with the report; raises ArchiveError on failure."""

    @abstractmethod
    async def query(self, vector: Sequence[float], top_k: int, ticker: Optional[str] = None) -> List[VectorMatch]:
        """Return up to *top_k* nearest reports, optionally restricted to one ticker."""


# ── Local (same-store) index ──────────────────────────────────────────────────

def cosine_scores(query: Sequence[float], matrix: np.ndarray) -> np.ndarray:
    """Cosine similarity of *query* against each row of *matrix*; zero vectors score 0."""
    q = np.asarray(query, dtype=float)
    q_norm = np.linalg.norm(q)
    row_norms = np.linalg.norm(matrix, axis=1)
    denom = row_norms * q_norm
    with np.errstate(divide="ignore", invalid="ignore"):
        scores = np.where(denom > 0, matrix @ q / denom, 0.0)
    return scores


class LocalVectorIndex(VectorIndex):
    """Embeddings stored as an attached field of the report row."""

    name = "local"

    def __init__(self, store: ReportStore) -> None:
        self.store = store

    async def upsert(self, report_id: str, ticker: str, created_at: datetime, vector: Sequence[float]) -> None:
        attached = await asyncio.to_thread(self.store.attach_embedding, report_id, list(vector))
        if not attached:
            raise ArchiveError(f"Report {report_id} not found or already indexed")

    async def query(self, vector: Sequence[float], top_k: int, ticker: Optional[str] = None) -> List[VectorMatch]:
        reports = await asyncio.to_thread(self.store.indexed, ticker)
        reports = [r for r in reports if r.embedding and len(r.embedding) == len(vector)]
        if not reports:
            return []

        matrix = np.array([r.embedding for r in reports], dtype=float)
        scores = cosine_scores(vector, matrix)
        matches = [
            VectorMatch(report_id=r.id, score=float(s), created_at=r.created_at)
            for r, s in zip(reports, scores)
        ]
        return rank_matches(matches, top_k)


# ── Pinecone (separate) index ─────────────────────────────────────────────────

def connect_pinecone_index(api_key: Optional[str], index_name: str, dimension: int = _EMBEDDING_DIM):
    """Return a connected Pinecone Index, creating a serverless index when missing."""
    from pinecone import Pinecone, ServerlessSpec  # noqa: PLC0415

    key = (api_key or "").strip()
    if not key:
        raise ConfigurationError("PINECONE_API_KEY is not set. Add it to your .env file.")

    pc = Pinecone(api_key=key)
    if not pc.has_index(index_name):
        logger.info("Pinecone index '%s' not found; creating it.", index_name)
        pc.create_index(
            name=index_name,
            dimension=dimension,
            metric="cosine",
            spec=ServerlessSpec(cloud="aws", region="us-east-1"),
        )
    index = pc.Index(index_name)
    logger.info("Connected to Pinecone index: %s", index_name)
    return index


class PineconeVectorIndex(VectorIndex):
    """Vectors in Pinecone, keyed by the primary record id, with ticker metadata."""

    name = "pinecone"

    def __init__(self, index, namespace: str = _NAMESPACE) -> None:
        self.index = index
        self.namespace = namespace

    async def upsert(self, report_id: str, ticker: str, created_at: datetime, vector: Sequence[float]) -> None:
        record = {
            "id": report_id,
            "values": [float(v) for v in vector],
            "metadata": {"ticker": ticker, "created_at": created_at.isoformat()},
        }
        try:
            await asyncio.to_thread(self.index.upsert, vectors=[record], namespace=self.namespace)
        except Exception as exc:
            raise ArchiveError(f"Pinecone upsert failed for {report_id}: {exc}") from exc
        logger.info("Pinecone: upserted report %s (namespace=%s)", report_id, self.namespace)

    async def query(self, vector: Sequence[float], top_k: int, ticker: Optional[str] = None) -> List[VectorMatch]:
        kwargs: dict = {
            "vector": [float(v) for v in vector],
            "top_k": top_k,
            "namespace": self.namespace,
            "include_metadata": True,
        }
        if ticker:
            kwargs["filter"] = {"ticker": {"$eq": ticker}}

        try:
            response = await asyncio.to_thread(self.index.query, **kwargs)
        except Exception as exc:
            raise ArchiveError(f"Pinecone query failed: {exc}") from exc

        matches = []
        for match in response.get("matches", []):
            metadata = match.get("metadata") or {}
            created = metadata.get("created_at")
            matches.append(VectorMatch(
                report_id=match.get("id"),
                score=match.get("score", 0.0),
                created_at=datetime.fromisoformat(created) if created else _EPOCH,
            ))
        return rank_matches(matches, top_k)
