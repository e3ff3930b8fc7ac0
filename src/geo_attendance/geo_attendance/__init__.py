"""Geo Attendance package.

Organized by feature modules (attendance, preferences, stats, ...) with a thin
Flask controller layer over service and repository layers. Check-in runs a gate
chain (guest quota, biometric, office proximity) before persisting to either a
local SQLite store or a remote MongoDB store.
"""
