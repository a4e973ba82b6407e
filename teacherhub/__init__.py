"""TeacherHub Package — offline record-keeper for students, groups, sessions, grades and fees.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)

Design Decisions:
    - Empty __init__.py: explicit imports only, no star exports
"""
