# Routes package init
"""
QuickNote - Routes Package
============================

Route Inventory:
    - health.py:  GET /health                   (storage health probe)
    - notes.py:   GET|HEAD /favicon.ico          (embedded icon)
                  GET|POST|OPTIONS /{path}       (read / write / preflight)

health must be included before notes: the notes router ends in a catch-all.
"""
