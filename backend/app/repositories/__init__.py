# Repositories package init
"""
DiveLog Backend: Store Layer
============================

What:  The only code that issues SQL. Each repository wraps one AsyncSession
       handed in by the caller; none of them commits.
Why:   Services stay testable against an in-memory SQLite database and never
       touch a global database handle.

Repository Inventory:
    - DiveSiteRepository: dive_sites lookups, inserts, updates, deletes
    - DiveRepository:     dives CRUD and the two duplicate-count queries
    - SettingsRepository: get-or-create and update of user_settings

Error Handling:
    SQLAlchemyError is logged with the operation name and re-raised as
    StorageError; the session dependency then rolls the transaction back.
"""
