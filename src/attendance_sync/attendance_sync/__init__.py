"""Attendance sync package.

Pulls punch events from external attendance databases (legacy DeviceLogs
tables, Hikvision access-control logs) and reconciles them into per-day
check-in / check-out records. Organized by feature modules (sources, sync,
attendance, employees) with repository and service layers, as in a small
Flask application.
"""
