"""Context core — markdown sections, role views and a cached file store.

Layout:
    sections.py   # parse(): markdown text -> [Section], role tags from headings/comments
    filters.py    # coordinator/executor/shared/unassigned views, keyword filters, analysis
    store.py      # ContextStore: mtime cache, directory load, merge, updates
    errors.py     # NotFoundError / PermissionDeniedError / ContextIOError

Role tags in a document:
    # Roadmap [role: coordinator]
    ## API contract [roles: coordinator, executor]
    <!-- role: executor -->
"""
