"""Chat pipeline core: session contract, state, rate limiting, fallbacks.

Import ``ChatPipeline`` and ``build_pipeline`` from
``craft_companion.core.pipeline``; this package itself stays import-light so
that ``craft_companion.interpret`` can depend on ``core.session``.
"""
