"""
API Package

HTTP endpoints under /api:
- carriers: verification and cached profiles
- loads: available loads, load creation, best-load assignment
- assignments: confirm / cancel
"""
