# Routes package init
"""
DiveLog Backend: API Routes Package
===================================

Route Inventory:
    - dives.py:       /api/v1/dives         (list, create, batch, update, delete)
    - dive_sites.py:  /api/v1/dive-sites    (list, search, get, create, update, delete)
    - settings.py:    /api/v1/settings      (get, update)
    - health.py:      /health               (service health check)
    - deps.py:        shared parameter parsing and service construction

Routes stay thin: parse parameters, call one service method, return its
result. Business rules live in app.services.
"""
