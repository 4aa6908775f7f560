from .case_insensitive_map import CaseInsensitiveMap

__all__ = ["CaseInsensitiveMap"]
