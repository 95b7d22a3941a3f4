"""hubdetect - fetch, configure and run Black Duck detect during a build."""

__version__ = "0.3.0"
