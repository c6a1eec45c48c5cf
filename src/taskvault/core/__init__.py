"""Core task-collection engine: models, validation, storage, partitioning and indexing.

Submodules are imported directly (``taskvault.core.storage``,
``taskvault.core.partition``...) since storage depends on ``taskvault.config``,
which in turn imports ``taskvault.core.errors``.
"""
