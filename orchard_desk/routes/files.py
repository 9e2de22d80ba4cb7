from __future__ import annotations

from fastapi import APIRouter, File, HTTPException, UploadFile
from fastapi.responses import PlainTextResponse

from orchard_desk.application import DocumentNotFoundError, DocumentStateError, get_services
from orchard_desk.core.logging import get_logger
from orchard_desk.extractors.detect import ExtractionError, UnsupportedDocumentError
from orchard_desk.infrastructure import PersistenceError, VectorIndexError

router = APIRouter(tags=["files"])

logger = get_logger(__name__)


def _not_found(document_id: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"file {document_id} not found")


@router.get("/files")
async def list_files() -> dict:
    documents = get_services().documents
    return {"items": [record.to_dict() for record in documents.list_documents()]}


@router.post("/upload")
async def upload_files(files: list[UploadFile] = File(...)) -> dict:
    """Store one or more source documents as ``raw`` catalog entries."""
    if not files:
        raise HTTPException(status_code=400, detail="At least one file must be provided")

    batch = []
    try:
        for upload in files:
            if not upload.filename:
                raise HTTPException(status_code=400, detail="Uploaded file must have a filename")
            batch.append((upload.filename, upload.content_type, upload.file))
        records = get_services().documents.upload(batch)
    except PersistenceError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    finally:
        for upload in files:
            await upload.close()

    return {"items": [record.to_dict() for record in records]}


@router.post("/convert/{document_id}")
async def convert_file(document_id: str) -> dict:
    documents = get_services().documents
    try:
        record = await documents.convert(document_id)
    except DocumentNotFoundError as exc:
        raise _not_found(document_id) from exc
    except UnsupportedDocumentError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except ExtractionError as exc:
        logger.error("conversion failed id=%s: %s", document_id, exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    except PersistenceError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return {"success": True, "file": record.to_dict()}


@router.post("/embed/{document_id}")
async def embed_file(document_id: str) -> dict:
    documents = get_services().documents
    try:
        result = await documents.embed(document_id)
    except DocumentNotFoundError as exc:
        raise _not_found(document_id) from exc
    except DocumentStateError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except VectorIndexError as exc:
        raise HTTPException(status_code=503, detail=f"vector index unavailable: {exc}") from exc
    except PersistenceError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return {"success": True, "fileId": result.file_id, "chunksProcessed": result.chunks}


@router.get("/files/{document_id}/content", response_class=PlainTextResponse)
async def get_file_content(document_id: str) -> str:
    try:
        return get_services().documents.get_content(document_id)
    except DocumentNotFoundError as exc:
        raise _not_found(document_id) from exc


@router.put("/files/{document_id}/content")
async def put_file_content(document_id: str, payload: dict) -> dict:
    content = payload.get("content")
    if not isinstance(content, str):
        raise HTTPException(status_code=400, detail="content must be a string")
    try:
        record = await get_services().documents.put_content(document_id, content)
    except DocumentNotFoundError as exc:
        raise _not_found(document_id) from exc
    except PersistenceError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return {"success": True, "file": record.to_dict()}


@router.delete("/files/{document_id}")
async def delete_file(document_id: str) -> dict:
    try:
        await get_services().documents.delete(document_id)
    except DocumentNotFoundError as exc:
        raise _not_found(document_id) from exc
    except PersistenceError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return {"success": True}


@router.get("/collections")
async def list_collections() -> dict:
    try:
        names = await get_services().documents.list_collections()
    except VectorIndexError as exc:
        logger.warning("collections unavailable: %s", exc)
        names = []
    return {"items": names}


@router.delete("/collections/{name}")
async def delete_collection(name: str) -> dict:
    try:
        await get_services().documents.delete_collection(name)
    except VectorIndexError as exc:
        raise HTTPException(status_code=503, detail=f"vector index unavailable: {exc}") from exc
    return {"success": True}
