"""Unit tests for individual components in isolation.

Coverage:
    - models/: Strict validation of the analysis contract
    - encoding/: Reading uploads and files into payloads
    - gateway/: Configuration, request building and error mapping
    - session/: Conversation store and view controller state machine
    - ui/: Reply formatting
"""
