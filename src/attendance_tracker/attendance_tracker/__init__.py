"""Attendance Tracker package.

Feature modules (attendance, stats, realtime, users) sit behind a thin Flask
controller layer; services depend on repository protocols so the durable
MySQL store and the in-memory degraded-mode store are interchangeable.
"""
