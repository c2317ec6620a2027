"""NiceGUI interface - thin visualization layer for chat interactions.

Responsibilities:
    - Conversation sidebar (new, select, delete)
    - Message display with streaming indicator
    - Markdown and tagged code-block rendering
    - Auto-growing message input

Contains no chat state of its own. Delegates to localchat.chat.
"""
