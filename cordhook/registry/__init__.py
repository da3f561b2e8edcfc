"""Handler registry: validation and indexing of commands and components.

The registry provides:
- Structural validation of caller-supplied definitions as tagged results
- Immutable lookup indexes keyed by command ``(name, type)`` or ``custom_id``
- Structured rejection records for anything dropped during indexing
"""
