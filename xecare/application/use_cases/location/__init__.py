"""Permission-gated acquisition of the user's position."""

from .tracker import UserLocationTracker

__all__ = ["UserLocationTracker"]
