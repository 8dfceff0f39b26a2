"""HTTP resources exposing the content registry."""
