"""HTTP API application and auxiliary routes."""
