"""Session state for one uploaded paper.

Responsibilities:
    - Upload -> analyzing -> ready state machine
    - Concurrent extraction and chat bootstrap
    - Conversation store with a single streaming writer
    - Snapshots and change notifications for renderers
"""

from quantscholar.session.controller import ViewController
from quantscholar.session.conversation import ConversationStore

__all__ = ["ConversationStore", "ViewController"]
