# Utilities package init
"""
DiveLog Backend: Utilities
==========================

Small dependency-free helpers shared by services and schemas:
    - geo.py:   great-circle distance and the same-site radius
    - dates.py: lenient parsing and offset-free formatting of dive datetimes
"""
