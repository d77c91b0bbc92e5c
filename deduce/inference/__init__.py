from .rule import InferenceRule

__all__ = ["InferenceRule"]
