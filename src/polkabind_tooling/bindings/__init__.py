"""UniFFI binding generation (Kotlin)."""

from .generate import bindgen_command, expected_glue_path, generate_bindings

__all__ = ["bindgen_command", "expected_glue_path", "generate_bindings"]
