"""Mount layer.

This package holds everything a mountable store needs beyond the base
store: the registry of mounted paths, the per-node viewed state cache, and
the reduction pipeline that walks mounted reducers on every dispatch.
"""
