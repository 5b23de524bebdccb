"""Document encoders."""
