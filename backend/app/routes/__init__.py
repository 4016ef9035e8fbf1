# Routes package init
"""
VoterReg Backend — API Routes Package
======================================

What:  HTTP route handlers that accept requests and return responses.

Route Inventory:
    - applications.py: POST  /api/applications                         (submit)
                       GET   /api/applications/{public_id}             (read back)
    - review.py:       PATCH /api/applications/{public_id}/status
                       PATCH /api/applications/{public_id}/remarks
                       PATCH /api/applications/{public_id}/erb-hearing-date
                       POST  /api/applications/{public_id}/approve
                       GET   /api/applications/{public_id}/assignments
    - files.py:        GET   /files/{bucket}/{path}                    (stored photos)
    - health.py:       GET   /health                                   (service health)

Routes stay thin: they parse the request, call one service method and shape
the response. Errors propagate to the global handlers in main.py.
"""
