"""Quick Note - timestamped notes captured into daily markdown documents."""

__version__ = "0.1.0"
