"""Domain Interfaces (Ports):

Defines the contracts (Abstract Base Classes) that storage backends
must implement. Callers depend on these interfaces, not on concrete
implementations.
"""
