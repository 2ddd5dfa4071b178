"""Small building blocks for systems programs: containers, strings, logging, I/O, threads, channels and argument parsing."""

__version__ = "0.1.0"