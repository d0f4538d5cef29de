"""Manufacturing features for printed signs.

Split-half channels with tongue-and-groove seams, end connectors for
chaining printed segments, wire channels, tile connector tabs, and the
fittings of neon-style channels: snap tabs, registration pins, feed holes,
bridges and bezier path connections.

Example Usage
-------------
>>> from signforge.paths import Path
>>> from signforge.manufacturing import split_halves, path_end_connectors
>>>
>>> path = Path.from_points([(0, 0), (40, 0), (40, 30)])
>>> top, bottom = split_halves(path, channel_depth=8.0, wall_thickness=1.5)
>>> top += path_end_connectors(path, outer_radius=5.5, top=True)
"""

# Data structures
from .data import (
    JointProfile,
    ConnectorSpec,
    ConnectionResult,
)

# Seams
from .joints import (
    joint_profile,
    split_half,
    split_halves,
)

# Connectors
from .connectors import (
    split_connector,
    connector_specs,
    path_end_connectors,
    wire_channel,
    connector_tabs,
)

# Fittings
from .fittings import (
    cylinder,
    snap_tabs,
    pin_positions,
    registration_pins,
    feed_hole,
    feed_holes,
    bridge_paths,
    bezier_connection,
    connect_paths,
)

__all__ = [
    'JointProfile',
    'ConnectorSpec',
    'ConnectionResult',
    'joint_profile',
    'split_half',
    'split_halves',
    'split_connector',
    'connector_specs',
    'path_end_connectors',
    'wire_channel',
    'connector_tabs',
    'cylinder',
    'snap_tabs',
    'pin_positions',
    'registration_pins',
    'feed_hole',
    'feed_holes',
    'bridge_paths',
    'bezier_connection',
    'connect_paths',
]
