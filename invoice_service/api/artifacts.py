"""
Signed artifact download endpoint
"""
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from invoice_service.services.errors import StoreError
from invoice_service.storage.artifact_store import ArtifactStore, CONTENT_TYPE_PDF, get_artifact_store

router = APIRouter(prefix="/artifacts", tags=["artifacts"])


@router.get("/{key:path}", summary="Download artifact via signed URL")
def download_artifact(
    key: str,
    token: str = Query(..., description="Signed read token"),
    store: ArtifactStore = Depends(get_artifact_store)
):
    """
    Return a stored invoice if the token grants read access to it
    """
    if not store.verify_read_token(key, token):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid or expired link")

    try:
        content = store.read(key)
    except StoreError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)

    if content is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Artifact {key} not found")

    filename = key.rsplit("/", 1)[-1]
    return Response(
        content=content,
        media_type=CONTENT_TYPE_PDF,
        headers={"Content-Disposition": f'inline; filename="{filename}.pdf"'}
    )
