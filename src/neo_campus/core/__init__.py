"""Core building blocks shared by all neo-campus features."""
