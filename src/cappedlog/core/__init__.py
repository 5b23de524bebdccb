"""Core domain: records, document construction and encoding."""
