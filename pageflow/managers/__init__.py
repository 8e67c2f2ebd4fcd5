from .base import ArtifactManager, coerce_uuid, require_identity
from .content_manager import ContentArtifactManager
from .seo_manager import SeoArtifactManager

__all__ = [
    "ArtifactManager",
    "ContentArtifactManager",
    "SeoArtifactManager",
    "coerce_uuid",
    "require_identity",
]
