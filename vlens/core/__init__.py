"""Core request pipeline and version suggestion engine."""
