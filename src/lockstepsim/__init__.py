"""
lockstepsim: Discrete-Event Lockstep Synchronization Simulator

A simulator of peer-to-peer lockstep, the scheme deterministic multiplayer
games use to keep every participant on the same update cycle.

Core concepts:
- Clients tick at a fixed rate and announce each completed cycle to peers
- Announcements travel with a sampled network latency
- A client may run at most B cycles ahead of the inputs it holds (buffer depth)
- Running out of buffer stalls the client until peer input arrives
- Stall frequency and catch-up depend on B and the latency distribution

See SPEC_FULL.md and DESIGN.md for full details.
"""

__version__ = "0.1.0"
