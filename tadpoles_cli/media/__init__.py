"""
Media Processing Layer.

This package is responsible for all media file operations: downloading
attachments, correcting mislabeled image types and rewriting timestamps.
"""

from .fetcher import AttachmentFetcher
from .sniffer import MediaTypeSniffer
from .tagger import MetadataRewriter

__all__ = ["AttachmentFetcher", "MediaTypeSniffer", "MetadataRewriter"]
