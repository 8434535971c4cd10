"""Configuration, external authorization, Envoy resource builders and a gRPC health probe for the Kourier gateway."""

__version__ = "0.1.0"