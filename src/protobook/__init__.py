"""mdBook preprocessor for protobuf reference documentation."""

__version__ = "0.1.0"
