"""NiceGUI interface - thin presentation layer over the chat core.

Responsibilities:
    - Launcher and floating chat widget (open, minimized, expanded)
    - Transcript rendering with quick-reply buttons and auxiliary links
    - Connectivity indicator and disabled input while offline
    - Browser navigation for links, calls and promotions

Contains no protocol logic. Reads session state and calls the shell and
dispatcher.
"""
