"""Studio rental booking and payment backend."""
