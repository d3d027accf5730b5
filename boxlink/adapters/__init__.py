"""Adapter package for external I/O implementations.

Purpose:
    Collect concrete implementations for domain ports: the list-store REST
    client, an in-memory list store, mailbox sources and local settings
    storage.

Dependencies:
    ``list_store_rest`` and ``http_client`` depend on ``requests``; the rest
    use the filesystem and domain protocol definitions only.

Call context:
    Imported by ``boxlink.app.controller`` for runtime composition and by tests
    for fakes and transport-level behavior verification.
"""
