"""Cast channel messages, framed TLS messaging and sink models for network displays."""

__version__ = "0.97.0"