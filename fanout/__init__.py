"""HTTP fan-out forwarder.

Replicates every inbound request to a fixed set of target origins and
answers the caller with one reconciled response.
"""

__version__ = "1.0.0"
