"""Core functionality for cloudauth: HTTP plumbing and provider resolution."""
