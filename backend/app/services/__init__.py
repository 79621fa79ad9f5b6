# Services package init
"""
DiveLog Backend: Services Layer
===============================

What:  Business rules between routes (HTTP) and repositories (SQL).
How:   Services are built per request on the request's AsyncSession
       (see app.routes.deps) and raise app.exceptions errors, which the
       global handlers turn into HTTP responses.

Service Inventory:
    - DiveSiteResolver:       (name, coordinates) -> canonical DiveSite
    - DuplicateDiveDetector:  create-path and update-path duplicate rules
    - DiveUpdateReconciler:   site and conflict decision for dive edits
    - DiveService:            /dives list, create, batch, update, delete
    - DiveSiteService:        /dive-sites list, search, CRUD
    - SettingsService:        per-user preferences with defaults
"""
