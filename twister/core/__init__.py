"""Core gameplay primitives (key alphabet, pressed-set tracking, and events).

Kept free of FastAPI and redis concerns so the engine can be driven from API
routes, WebSockets, and tests alike.
"""
