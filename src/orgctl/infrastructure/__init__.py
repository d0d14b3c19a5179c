"""Infrastructure layer — JSON document storage, backups, and the workspace.

Storage depends on stdlib only. The workspace wires settings, storage,
and the static lookup tables together for the service layer.
It must never import from services, commands, or output.
"""
