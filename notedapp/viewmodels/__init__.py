"""ViewModel package for UI state and command surfaces.

Call context:
    ``notedapp.app.controller`` builds the view models and hands them to
    whatever view layer renders them.

Dependencies:
    Modules in this package depend on domain types, the orchestrators, and
    lightweight formatting helpers only. Transport stays in adapters.

Responsibilities:
    - Expose mutable form state and command callbacks.
    - Turn ``UseCaseError`` codes into status text.
    - Transform domain records into display rows.
"""
