"""Routers package — HTTP endpoint definitions.

Files:
  deps.py  — Authentication / role-guard dependencies
  v1/      — Versioned API routes (/api/v1/*)
"""
