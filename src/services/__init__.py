"""Business logic services used by handlers.

Services are imported lazily by handlers so a cold start only pays for the
SQLAlchemy engine and Bedrock client of the route being served.
"""

# Do NOT import services here - use lazy loading in handlers instead
