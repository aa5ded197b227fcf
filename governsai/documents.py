"""
GovernsAI SDK - Document storage with OCR, chunking and vector search.
"""

import json
import logging
import os
from typing import IO, Any, Optional, Union

from .base import FeatureClient
from .exceptions import DocumentError
from .models import DocumentDetails, DocumentSearchHit
from .utils import build_query_params

logger = logging.getLogger("governsai.documents")

FileInput = Union[bytes, bytearray, str, "os.PathLike[str]", IO[bytes]]


def _read_file(file: FileInput, filename: Optional[str]) -> tuple[bytes, str]:
    """Return the file's bytes and the name to upload it under."""
    if isinstance(file, (bytes, bytearray)):
        return bytes(file), filename or "document"
    if isinstance(file, (str, os.PathLike)):
        with open(file, "rb") as f:
            return f.read(), filename or os.path.basename(os.fspath(file))
    if hasattr(file, "read"):
        name = filename or os.path.basename(getattr(file, "name", "") or "") or "document"
        return file.read(), name
    raise DocumentError(f"Unsupported file input: {type(file).__name__}", retryable=False)


class DocumentClient(FeatureClient):
    """Client for the document store."""

    error_cls = DocumentError

    async def upload_document(
        self,
        file: FileInput,
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
        external_user_id: Optional[str] = None,
        external_source: Optional[str] = None,
        metadata: Optional[dict[str, Any]] = None,
        scope: Optional[str] = None,
        visibility: Optional[str] = None,
        email: Optional[str] = None,
        name: Optional[str] = None,
        processing_mode: Optional[str] = None,
    ) -> dict[str, Any]:
        """
        Upload a document for OCR, chunking and embedding.

        ``file`` may be bytes, a path or a binary file object. Returns the
        platform's response, including ``documentId`` and ``status``.
        """
        content, upload_name = _read_file(file, filename)
        mime = content_type or "application/octet-stream"
        form = {
            "filename": upload_name,
            "contentType": content_type,
            "externalUserId": external_user_id,
            "externalSource": external_source,
            "metadata": json.dumps(metadata) if metadata else None,
            "scope": scope,
            "visibility": visibility,
            "email": email,
            "name": name,
            "processingMode": processing_mode,
        }
        form = {k: v for k, v in form.items() if v is not None}
        logger.debug("Uploading document %s (%d bytes)", upload_name, len(content))
        data = await self._request(
            "POST",
            "/api/v1/documents",
            "upload document",
            files={"file": (upload_name, content, mime)},
            form=form,
        )
        logger.info("Document uploaded: %s", data.get("documentId"))
        return data

    async def get_document(
        self,
        document_id: str,
        include_chunks: Optional[bool] = None,
        include_content: Optional[bool] = None,
    ) -> DocumentDetails:
        data = await self._request(
            "GET",
            f"/api/v1/documents/{document_id}",
            "get document",
            params=build_query_params(
                {"includeChunks": include_chunks, "includeContent": include_content}
            ),
        )
        return DocumentDetails.from_dict(data.get("document") or {})

    async def list_documents(
        self,
        user_id: Optional[str] = None,
        external_user_id: Optional[str] = None,
        external_source: Optional[str] = None,
        status: Optional[str] = None,
        content_type: Optional[str] = None,
        include_archived: Optional[bool] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> tuple[list[DocumentDetails], dict[str, Any]]:
        """Returns the documents and the pagination block."""
        params = build_query_params(
            {
                "userId": user_id,
                "externalUserId": external_user_id,
                "externalSource": external_source,
                "status": status,
                "contentType": content_type,
                "includeArchived": include_archived,
                "limit": limit,
                "offset": offset,
            }
        )
        data = await self._request("GET", "/api/v1/documents", "list documents", params=params)
        documents = [DocumentDetails.from_dict(item) for item in data.get("documents", [])]
        return documents, data.get("pagination", {})

    async def search_documents(
        self,
        query: str,
        external_user_id: Optional[str] = None,
        external_source: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[DocumentSearchHit]:
        body: dict[str, Any] = {"query": query}
        if external_user_id:
            body["externalUserId"] = external_user_id
        if external_source:
            body["externalSource"] = external_source
        if limit is not None:
            body["limit"] = limit
        data = await self._request(
            "POST", "/api/v1/documents/search", "search documents", body=body
        )
        return [DocumentSearchHit.from_dict(item) for item in data.get("results", [])]

    async def delete_document(self, document_id: str) -> bool:
        """Delete a document and its chunks; True when the platform deleted it."""
        data = await self._request(
            "DELETE", f"/api/v1/documents/{document_id}", "delete document"
        )
        return bool(data.get("deleted", data.get("success", False)))
