"""Application composition layer for the mail panel.

``controller`` wires adapters and use cases from settings; ``panel_controller``
holds the session and view state the web UI renders.
"""
