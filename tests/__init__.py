"""Test package for QuantScholar.

Structure:
    - unit/: Individual module and class tests
    - integration/: HTTP API workflows end to end

The Gemini API is never called: unit tests mock the google-genai client and
everything above the gateway runs against a scripted fake gateway.
Leverages pytest with pytest-check for soft assertions.
"""
