"""Project-X — project and task tracker backend.

Users own or participate in projects, projects contain tasks, tasks
have assignees. Every read and write goes through one access-control
model: token identity, role policy, and per-resource visibility.
"""

__version__ = "0.1.0"
