"""Vector Map - interactive vector maps with regions, markers and data series.

A map engine featuring:
- Registered map definitions with detached insets (point -> inset routing)
- Anchored zoom and pan over a one-time base transform
- Per-category selection derived from entity handles
- State machine-based lifecycle with deferred initialization and clean teardown

Modules:
    core: Foundation classes (geometry index, viewport transform, listener registry)
    model: Data structures (entity handles, registry, selection, events)
    ui: Host tree, render surface, interaction and the VectorMap controller
    maps: Built-in JSON map definitions

Example:
    from vectormap.maps import register_builtin_maps
    from vectormap.ui import VectorMap

    register_builtin_maps()
    vmap = VectorMap(options={"map": "demo_islands", "regionsSelectable": True})
"""
