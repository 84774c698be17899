"""waymark - multi-modal routing client.

Turns user-entered locations into mode-tagged itineraries
(flight/train/bus/cab). State lives in reducer stores fed by a single
dispatcher; the routing gateway talks to the backends and reconciles
out-of-order responses; the URL sync mirrors state into shareable links.
"""

__version__ = "0.1.0"
