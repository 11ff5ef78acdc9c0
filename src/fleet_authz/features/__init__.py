"""Engine features: permission resolution and audit logging."""
