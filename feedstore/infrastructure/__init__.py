"""Infrastructure Layer: Contains concrete implementations and adapters.

Storage backends, the serializing store wrapper, configuration, logging
and console rendering.
"""
