"""Foundation layer: configuration, error types, callable plumbing."""
