"""
Shared building blocks for the sprite sheet service.

- logging_setup: JSON logging on stdout
- types: request-scoped records (descriptors, boxes, manifests, atlas results)
- utils: HTTP validator helpers (ETag generation, freshness, query toggles)
"""
