from __future__ import annotations

from typing import Callable

import numpy as np
from openai import OpenAI

EmbedFn = Callable[[list[str]], np.ndarray]


def embed_texts(
    texts: list[str],
    model: str = "text-embedding-3-small",
    batch_size: int = 256,
) -> np.ndarray:
    """Generate embedding vectors for input texts using OpenAI embeddings API.

    Args:
        texts: Input strings to embed.
        model: Embedding model name.
        batch_size: Maximum number of inputs sent per API request.

    Returns:
        A `float32` NumPy matrix shaped `(len(texts), embedding_dim)`.
    """
    client = OpenAI()
    vectors: list[list[float]] = []
    for offset in range(0, len(texts), batch_size):
        response = client.embeddings.create(model=model, input=texts[offset : offset + batch_size])
        vectors.extend(row.embedding for row in response.data)
    return np.array(vectors, dtype=np.float32)


def make_openai_embedder(model: str = "text-embedding-3-small") -> EmbedFn:
    def embed(texts: list[str]) -> np.ndarray:
        return embed_texts(texts, model=model)

    return embed


def make_local_embedder(model_name: str = "sentence-transformers/all-MiniLM-L6-v2") -> EmbedFn:
    """Return an offline embedding function backed by a sentence-transformers model.

    The model is loaded once; the same callable must be used at index and query time.
    """
    from sentence_transformers import SentenceTransformer

    model = SentenceTransformer(model_name)

    def embed(texts: list[str]) -> np.ndarray:
        return np.asarray(model.encode(texts, convert_to_numpy=True), dtype=np.float32)

    return embed


def cosine_similarity(query_vector: np.ndarray, matrix: np.ndarray) -> np.ndarray:
    """Compute cosine similarity between one query vector and many vectors.

    Args:
        query_vector: Query embedding vector.
        matrix: Candidate embedding matrix where each row is one vector.

    Returns:
        A 1D array of cosine similarity scores aligned to matrix rows.
    """
    query_norm = np.linalg.norm(query_vector)
    matrix_norm = np.linalg.norm(matrix, axis=1)
    denominator = np.maximum(query_norm * matrix_norm, 1e-12)
    return (matrix @ query_vector) / denominator
