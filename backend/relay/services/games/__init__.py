"""Game domain services: rules, room registry, room handlers and broadcast.

This package holds the room state machine. It is imported by the
dispatcher and the HTTP routes and never talks to Socket.IO directly;
outbound traffic goes through a ``Transport``.
"""
