"""To-do list domain.

This package defines the task entity and a task list service.
It drives the object context the way the sample app does.
"""
