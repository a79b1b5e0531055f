"""
Storage package
"""
from invoice_service.storage.artifact_store import ArtifactStore, ArtifactAck, get_artifact_store

__all__ = ["ArtifactStore", "ArtifactAck", "get_artifact_store"]
