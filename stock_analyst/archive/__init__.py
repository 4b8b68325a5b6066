"""
Archive package — persistence and semantic retrieval of past reports.

    report_store     SQLite text store (primary record)
    embeddings       OpenAI embedding function
    vector_store     local (same-store) and Pinecone vector indexes
    report_archive   ReportArchive: informed opinion + dual-store save
"""

from .embeddings import EmbeddingFunction, OpenAIEmbeddingFunction
from .report_archive import ReportArchive, ticker_query
from .report_store import ReportStore
from .vector_store import LocalVectorIndex, PineconeVectorIndex, VectorIndex, VectorMatch, connect_pinecone_index

__all__ = [
    "EmbeddingFunction",
    "OpenAIEmbeddingFunction",
    "ReportArchive",
    "ticker_query",
    "ReportStore",
    "LocalVectorIndex",
    "PineconeVectorIndex",
    "VectorIndex",
    "VectorMatch",
    "connect_pinecone_index",
]
