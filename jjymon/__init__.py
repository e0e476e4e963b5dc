"""Software receiver and decoder for the JJY longwave time signal, with a monochrome frame buffer."""

__version__ = "0.1.0"