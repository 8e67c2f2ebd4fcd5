from __future__ import annotations

from typing import Any, Dict, Optional, Union
from urllib.parse import urlparse
from uuid import UUID

from pageflow.errors import ValidationError
from pageflow.managers.base import ArtifactManager, coerce_uuid, require_identity
from pageflow.records import ArtifactKind, ContentArtifactRecord, NormalizedContent


ContentInput = Union[NormalizedContent, Dict[str, Any]]


def clean_content(content: Optional[ContentInput]) -> NormalizedContent:
    if content is None:
        raise ValidationError("Content is required.", field="content")
    if isinstance(content, dict):
        content = NormalizedContent.from_dict(content)
    if content.is_empty():
        raise ValidationError("Content file contained no usable fields.", field="content")
    return content


def clean_document_url(url: Optional[str]) -> Optional[str]:
    if url is None or not url.strip():
        return None
    url = url.strip()
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValidationError(
            "Source document link must be an http(s) URL.", field="source_document_url"
        )
    return url


class ContentArtifactManager(ArtifactManager):
    kind = ArtifactKind.CONTENT

    async def upload(
        self,
        page_id: Union[UUID, str],
        content: Optional[ContentInput],
        uploader: Optional[str],
        source_document_url: Optional[str] = None,
    ) -> ContentArtifactRecord:
        uploader = require_identity(uploader)
        page_uuid = coerce_uuid(page_id, "page_id")
        normalized = clean_content(content)
        document_url = clean_document_url(source_document_url)

        record, _ = await self._commit(
            page_uuid,
            {"parsed_content": normalized.to_dict(), "source_document_url": document_url},
            uploader,
        )
        return record

    async def correct(
        self,
        artifact_id: Union[UUID, str],
        editor: Optional[str],
        *,
        content: Optional[ContentInput] = None,
        source_document_url: Optional[str] = None,
    ) -> ContentArtifactRecord:
        editor = require_identity(editor)
        changes: Dict[str, Any] = {}
        if content is not None:
            changes["parsed_content"] = clean_content(content).to_dict()
        if source_document_url is not None:
            changes["source_document_url"] = clean_document_url(source_document_url)
        return await self._correct(coerce_uuid(artifact_id, "artifact_id"), changes, editor)
