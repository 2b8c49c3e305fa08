"""devrun - run project scripts through whichever tool the project uses."""

__version__ = "0.1.0"
