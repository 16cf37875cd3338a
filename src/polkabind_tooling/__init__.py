"""Build, package, and publish the Polkabind Kotlin/Android bindings.

Stages: build (host + cross), bindings, assemble, publish. See pipeline.run_pipeline.
"""

__version__ = "0.1.0"
