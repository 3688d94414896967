"""Etherscan HTTP client, response decoding, metadata and build-file helpers."""
