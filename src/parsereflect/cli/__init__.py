"""parsereflect command line interface."""
