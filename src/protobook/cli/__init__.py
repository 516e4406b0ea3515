"""Command line entry point: `mdbook-protobuf`."""
