"""
Shared, cross-cutting code for the API.

`core/` holds small building blocks that multiple features use
(DB wiring, logging setup). Feature-specific SQL and business logic stay in
the corresponding feature package (e.g. `document_templates/`).
"""
