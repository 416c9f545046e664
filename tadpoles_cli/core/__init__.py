"""
Core application engine for orchestrating an ingestion run.

This package contains the primary logic. The `EventPaginator` walks the feed
backward in time, and the `IngestionDriver` hands each attachment it finds to
the media layer.
"""
