# Routes package init
"""
Recortes Backend - API Routes Package
======================================

Route Inventory:
    - cuts.py:    POST   /cuts          (create, multipart with image)
                  GET    /cuts          (paginated, filtered list)
                  GET    /cuts/{id}     (single cut)
                  PUT    /cuts/{id}     (partial update, optional new image)
                  DELETE /cuts/{id}     (delete row and image)
    - health.py:  GET    /health        (liveness and dependency status)

Routes stay thin: they pull validated input from dependencies, call
CutService and pick the status code. Business rules live in services.
"""
