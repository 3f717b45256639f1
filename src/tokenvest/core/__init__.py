"""Configuration, logging, errors, metrics and HTTP API for TokenVest."""
