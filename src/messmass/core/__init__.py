"""Core configuration, logging and exceptions for MessMass."""
