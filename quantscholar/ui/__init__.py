"""NiceGUI interface - thin visualization layer over the view controller.

Responsibilities:
    - PDF upload with analyzing progress
    - Read-only analysis dashboard
    - Tutor chat with streaming replies and math rendering

Contains no business logic. Redraws from controller snapshots.
"""
