# Services package init
"""
Recortes Backend - Services Layer
==================================

What:  Business logic between the routes (HTTP) and the stores (database, blobs).
How:   Services receive their collaborators explicitly and are built per
       request through FastAPI dependencies, so tests can swap any of them.

Service Inventory:
    - object_keys:   deterministic object names from cut metadata (pure functions)
    - BlobStore:     image upload, public URL derivation, best-effort removal
    - UserService:   just-in-time user provisioning from verified token claims
    - CutService:    the cut lifecycle (create, list, get, update, remove)
"""
