"""CellarBook - personal wine cellar inventory tracker."""

__version__ = "0.3.0"
