"""
Thank-you gram message operations.

The modules here take an injected Firestore client so the HTTP functions in
main.py and the maintenance scripts share one implementation.
"""
