"""Application composition layer for the note-taking client.

Controllers in this package wire adapters, use cases, and view models into a
runnable client session without placing business logic in the view layer.
"""
