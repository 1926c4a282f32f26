"""
Document Search Tool (RAG)

Retrieves document fragments from a Chroma vector store by semantic
similarity. The query is embedded through an OpenAI-compatible embeddings
endpoint (LM Studio by default) and the nearest fragments are formatted as
the observation.
"""

import logging
from typing import Any

import httpx

from ...memory import MemoryService
from ..base import ToolHandler, error_observation
from ..models import ParameterSchema, ToolDefinition
from ..parameters import ToolParameters

logger = logging.getLogger("agentloop.tools.documents")

MEMORY_MODULE = "rag"
MAX_RESULTS_LIMIT = 10


class DocumentSearchError(Exception):
    """Raised when the vector store or embeddings service misbehaves"""

    pass


class DocumentSearchHandler(ToolHandler):
    """Semantic search over documents indexed in Chroma."""

    tool_name = "search_documents"

    def __init__(
        self,
        embeddings_url: str = "http://localhost:1234/v1/embeddings",
        chroma_url: str = "http://localhost:8000/api/v1",
        collection_name: str = "Documents",
        max_results: int = 5,
        timeout_seconds: float = 300.0,
        embedding_model: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Args:
            embeddings_url: OpenAI-compatible embeddings endpoint
            chroma_url: Base URL of the Chroma REST API
            collection_name: Collection to search (created if missing)
            max_results: Default number of fragments to return
            timeout_seconds: HTTP timeout for each request
            embedding_model: Optional model name sent with embedding requests
            transport: Custom httpx transport, mainly for tests
        """
        self.embeddings_url = embeddings_url
        self.chroma_url = chroma_url.rstrip("/")
        self.collection_name = collection_name
        self.max_results = max_results
        self.timeout_seconds = timeout_seconds
        self.embedding_model = embedding_model
        self._transport = transport

        logger.debug(
            f"Document search configured - embeddings: {embeddings_url}, "
            f"chroma: {self.chroma_url}, collection: {collection_name}"
        )

    def describe(self) -> ToolDefinition:
        return ToolDefinition(
            name=self.tool_name,
            description=(
                "Search indexed documents using retrieval-augmented generation. "
                "Looks up semantically similar fragments in a vector database "
                "(Chroma). Useful for finding specific information in previously "
                "indexed documents (.docx, .pdf, .json, etc.)."
            ),
            parameters=[
                ParameterSchema(
                    name="query",
                    type="string",
                    description="What to look for in the indexed documents.",
                    required=True,
                ),
                ParameterSchema(
                    name="max_results",
                    type="string",
                    description=(
                        "Maximum number of relevant fragments to return "
                        f"(default: {self.max_results})."
                    ),
                    required=False,
                ),
            ],
        )

    async def execute(self, parameters: ToolParameters, memory: MemoryService) -> str:
        query = parameters.get_string("query")
        if not query.strip():
            return error_observation("the search query cannot be empty.")

        max_results = min(
            parameters.get_int("max_results", self.max_results), MAX_RESULTS_LIMIT
        )
        if max_results < 1:
            max_results = self.max_results

        logger.debug(f"Document search: '{_truncate(query, 200)}' - max_results: {max_results}")

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds, transport=self._transport
            ) as client:
                collection_id = await self._get_or_create_collection(client)
                embedding = await self._create_embedding(client, query)
                documents = await self._query_collection(
                    client, collection_id, embedding, max_results
                )
        except httpx.HTTPError as e:
            logger.error(f"Document search connection error: {e}")
            return error_observation(
                f"document search connection failed: {e}. Check that the embeddings "
                f"service is running at {self.embeddings_url} and Chroma at {self.chroma_url}."
            )
        except (DocumentSearchError, ValueError, KeyError) as e:
            logger.error(f"Document search failed: {e}")
            return error_observation(f"document search failed: {e}")
        except Exception as e:
            logger.exception(f"Unexpected document search failure: {type(e).__name__}")
            return error_observation(f"document search failed: {type(e).__name__}: {e}")

        if not documents:
            return (
                f"Document search completed for `{query}`.\n"
                f"No relevant documents were found in collection '{self.collection_name}'. "
                "Make sure the documents have been indexed."
            )

        memory.add_to_module(
            MEMORY_MODULE,
            "system",
            f"Document search: '{_truncate(query, 100)}' - {len(documents)} results",
        )
        return self._format_results(query, documents)

    async def _get_or_create_collection(self, client: httpx.AsyncClient) -> str:
        response = await client.get(f"{self.chroma_url}/collections")
        if response.is_success:
            collections = response.json()
            if isinstance(collections, list):
                for collection in collections:
                    if collection.get("name") == self.collection_name and collection.get("id"):
                        logger.debug(f"Found collection '{self.collection_name}': {collection['id']}")
                        return collection["id"]

        response = await client.post(
            f"{self.chroma_url}/collections", json={"name": self.collection_name}
        )
        if not response.is_success:
            raise DocumentSearchError(
                f"could not create collection: {response.status_code} - {response.text}"
            )

        collection_id = response.json().get("id")
        if not collection_id:
            raise DocumentSearchError("created collection has no id")
        logger.info(f"Created collection '{self.collection_name}': {collection_id}")
        return collection_id

    async def _create_embedding(self, client: httpx.AsyncClient, text: str) -> list[float]:
        payload: dict[str, Any] = {"input": text}
        if self.embedding_model:
            payload["model"] = self.embedding_model

        response = await client.post(self.embeddings_url, json=payload)
        if not response.is_success:
            raise DocumentSearchError(
                f"embedding request failed: {response.status_code} - {response.text}"
            )

        data = response.json().get("data") or []
        if not data:
            raise DocumentSearchError("invalid embedding response: no data")
        return [float(value) for value in data[0]["embedding"]]

    async def _query_collection(
        self,
        client: httpx.AsyncClient,
        collection_id: str,
        embedding: list[float],
        n_results: int,
    ) -> list[str]:
        response = await client.post(
            f"{self.chroma_url}/collections/{collection_id}/query",
            json={"query_embeddings": [embedding], "n_results": n_results},
        )
        if not response.is_success:
            raise DocumentSearchError(
                f"collection query failed: {response.status_code} - {response.text}"
            )

        documents = response.json().get("documents") or []
        if not documents:
            return []
        return [doc for doc in documents[0] if isinstance(doc, str) and doc.strip()]

    def _format_results(self, query: str, documents: list[str]) -> str:
        lines = [
            "Document search results",
            f"Query: `{query}`",
            f"Documents found: {len(documents)}",
            "---",
        ]
        for index, document in enumerate(documents, start=1):
            lines.append(f"Fragment {index}:")
            lines.append(document)
            lines.append("---")
        lines.append(
            "Note: fragments were retrieved from the vector database by semantic "
            "similarity to the query."
        )
        return "\n".join(lines)


def _truncate(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."
