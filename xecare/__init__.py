"""Client core for the XeCare garage marketplace.

The package is split into ``domain`` entities, ``application`` use cases,
``infrastructure`` adapters (HTTP, geocoding, geolocation, storage, events) and
``interfaces`` (presenters and the command line).
"""

__version__ = "0.1.0"
