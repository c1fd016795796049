"""GraphQL service for the vehicle and parts catalogue.

This package exposes queries and mutations over two MongoDB collections
(vehicles and parts) and keeps the vehicle-to-part references consistent
across writes.
"""

__version__ = "0.1.0"
