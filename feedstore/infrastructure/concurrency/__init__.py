"""Operation serialization for feed stores."""
