"""Vector indexes - store segment embeddings and answer similarity queries.

Two interchangeable backends implement :class:`VectorIndex`:

- :class:`InMemoryVectorIndex` keeps everything in process memory (default).
- :class:`ChromaVectorIndex` stores entries in a ChromaDB collection.

Both score by cosine similarity, return at most ``top_k`` hits scoring at
least ``min_score``, ordered by descending score with ties broken by
insertion order.
"""

import itertools
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional, Sequence

import chromadb
from chromadb.api import ClientAPI
import numpy as np


@dataclass(frozen=True)
class Segment:
    """A chunk of document text, the unit of embedding and retrieval."""
    text: str
    document_id: Optional[int] = None
    document_title: Optional[str] = None
    chunk_index: int = 0


@dataclass
class SearchHit:
    """A segment returned from a similarity search."""
    segment: Segment
    score: float


@dataclass
class _Entry:
    seq: int
    segment: Segment
    vector: np.ndarray = field(repr=False)


def _check_lengths(segments: Sequence[Segment], vectors: Sequence[Sequence[float]]) -> None:
    if len(segments) != len(vectors):
        raise ValueError(
            f"Got {len(segments)} segments but {len(vectors)} embeddings"
        )


class VectorIndex(ABC):
    """Append-only store of (segment, embedding) pairs with similarity search."""

    @abstractmethod
    def add(self, segments: Sequence[Segment], vectors: Sequence[Sequence[float]]) -> None:
        """Append entries. len(segments) must equal len(vectors)."""

    @abstractmethod
    def search(
        self,
        query_vector: Sequence[float],
        top_k: int,
        min_score: float,
    ) -> list[SearchHit]:
        """Return up to top_k hits with score >= min_score, best first."""

    @abstractmethod
    def count(self) -> int:
        """Number of stored entries."""

    @abstractmethod
    def clear(self) -> None:
        """Remove all entries."""


class InMemoryVectorIndex(VectorIndex):
    """Vector index held in process memory; lost on restart.

    Writes take a lock; reads work on a snapshot of the entry list, so
    concurrent queries are safe alongside the single ingestion writer.
    """

    def __init__(self):
        self._entries: list[_Entry] = []
        self._dimension: Optional[int] = None
        self._seq = itertools.count()
        self._lock = threading.Lock()

    @property
    def dimension(self) -> Optional[int]:
        return self._dimension

    def add(self, segments: Sequence[Segment], vectors: Sequence[Sequence[float]]) -> None:
        _check_lengths(segments, vectors)
        arrays = [np.asarray(v, dtype=float) for v in vectors]

        with self._lock:
            dimension = self._dimension
            for array in arrays:
                if array.ndim != 1 or array.size == 0:
                    raise ValueError("Embeddings must be non-empty 1-D vectors")
                if dimension is None:
                    dimension = array.size
                elif array.size != dimension:
                    raise ValueError(
                        f"Embedding dimension {array.size} does not match index dimension {dimension}"
                    )
            self._dimension = dimension
            self._entries.extend(
                _Entry(seq=next(self._seq), segment=segment, vector=array)
                for segment, array in zip(segments, arrays)
            )

    def search(
        self,
        query_vector: Sequence[float],
        top_k: int,
        min_score: float,
    ) -> list[SearchHit]:
        entries = list(self._entries)
        if not entries or top_k <= 0:
            return []

        query = np.asarray(query_vector, dtype=float)
        if query.size != self._dimension:
            raise ValueError(
                f"Query dimension {query.size} does not match index dimension {self._dimension}"
            )

        matrix = np.vstack([entry.vector for entry in entries])
        norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query)
        dots = matrix @ query
        # Zero vectors have no direction; score them 0
        scores = np.divide(dots, norms, out=np.zeros_like(dots), where=norms != 0)

        # Python's sort is stable, so equal scores keep insertion order
        ranked = sorted(range(len(entries)), key=lambda i: -scores[i])
        hits = []
        for i in ranked:
            score = float(scores[i])
            if score < min_score:
                break
            hits.append(SearchHit(segment=entries[i].segment, score=score))
            if len(hits) == top_k:
                break
        return hits

    def count(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries = []
            self._dimension = None


class ChromaVectorIndex(VectorIndex):
    """Vector index stored in a ChromaDB collection using cosine distance."""

    def __init__(
        self,
        collection_name: str = "document_segments",
        chroma_client: Optional[ClientAPI] = None,
        persist_directory: Optional[str] = None,
    ):
        """Initialize the index.

        Args:
            collection_name: Name of the Chroma collection
            chroma_client: ChromaDB client (optional, creates default)
            persist_directory: Directory for a persistent client when none is given
        """
        if chroma_client:
            self.chroma_client = chroma_client
        elif persist_directory:
            self.chroma_client = chromadb.PersistentClient(path=persist_directory)
        else:
            self.chroma_client = chromadb.EphemeralClient()

        self.collection_name = collection_name
        self.collection = self.chroma_client.get_or_create_collection(
            name=collection_name,
            metadata={"hnsw:space": "cosine"}
        )
        self._lock = threading.Lock()
        self._next_seq = self.collection.count()

    def add(self, segments: Sequence[Segment], vectors: Sequence[Sequence[float]]) -> None:
        _check_lengths(segments, vectors)
        if not segments:
            return

        with self._lock:
            seqs = list(range(self._next_seq, self._next_seq + len(segments)))
            metadatas = []
            for seq, segment in zip(seqs, segments):
                metadata = {"seq": seq, "chunk_index": segment.chunk_index}
                # Chroma rejects None metadata values
                if segment.document_id is not None:
                    metadata["document_id"] = segment.document_id
                if segment.document_title is not None:
                    metadata["document_title"] = segment.document_title
                metadatas.append(metadata)

            self.collection.add(
                ids=[f"segment-{seq}" for seq in seqs],
                documents=[segment.text for segment in segments],
                metadatas=metadatas,
                embeddings=[list(map(float, v)) for v in vectors]
            )
            self._next_seq += len(segments)

    def search(
        self,
        query_vector: Sequence[float],
        top_k: int,
        min_score: float,
    ) -> list[SearchHit]:
        total = self.collection.count()
        if total == 0 or top_k <= 0:
            return []

        results = self.collection.query(
            query_embeddings=[list(map(float, query_vector))],
            n_results=min(top_k, total),
            include=["documents", "metadatas", "distances"]
        )

        ranked = []
        if results["ids"] and results["ids"][0]:
            for i, _ in enumerate(results["ids"][0]):
                metadata = results["metadatas"][0][i] or {}
                # Chroma reports cosine distance; similarity is its complement
                score = 1.0 - results["distances"][0][i]
                if score < min_score:
                    continue
                segment = Segment(
                    text=results["documents"][0][i],
                    document_id=metadata.get("document_id"),
                    document_title=metadata.get("document_title"),
                    chunk_index=metadata.get("chunk_index", 0),
                )
                ranked.append((metadata.get("seq", 0), SearchHit(segment=segment, score=score)))

        ranked.sort(key=lambda item: (-item[1].score, item[0]))
        return [hit for _, hit in ranked[:top_k]]

    def count(self) -> int:
        return self.collection.count()

    def clear(self) -> None:
        with self._lock:
            self.chroma_client.delete_collection(self.collection_name)
            self.collection = self.chroma_client.create_collection(
                name=self.collection_name,
                metadata={"hnsw:space": "cosine"}
            )
            self._next_seq = 0
